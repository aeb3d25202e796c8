"""
Автомат контекстов разбора.

Небольшая стековая машина, отслеживающая вложенность контекстов
(content / tag / expression / comment) по мере потребления токенов
и отвергающая некорректные последовательности разделителей.
"""

from __future__ import annotations

import enum
from typing import Dict, List, Optional, Tuple

from .tokens import Token, TokenType
from ..errors import TemplateSyntaxError, UnterminatedConstructError


class ScopeContext(enum.Enum):
    """Контексты разбора."""
    CONTENT = "content"
    TAG = "tag"
    EXPRESSION = "expression"
    COMMENT = "comment"


# (вершина стека, разделитель) -> контекст для push или None для pop
_TRANSITIONS: Dict[Tuple[ScopeContext, TokenType], Optional[ScopeContext]] = {
    (ScopeContext.CONTENT, TokenType.COMMENT_START): ScopeContext.COMMENT,
    (ScopeContext.COMMENT, TokenType.COMMENT_END): None,
    (ScopeContext.CONTENT, TokenType.EXPR_START): ScopeContext.EXPRESSION,
    (ScopeContext.EXPRESSION, TokenType.EXPR_END): None,
    (ScopeContext.CONTENT, TokenType.TAG_START): ScopeContext.TAG,
    (ScopeContext.TAG, TokenType.TAG_END): None,
}


class ScopeAutomaton:
    """
    Стек контекстов разбора, изначально [content].

    Литеральные токены значимы в зависимости от вершины стека: в content
    они становятся текстовыми узлами, в expression/tag — содержимым
    ожидающего узла, в comment — поглощаются вместе с любыми
    разделителями, кроме закрывающего #}.
    """

    def __init__(self, template_name: str = "(string)"):
        self.template_name = template_name
        self.stack: List[ScopeContext] = [ScopeContext.CONTENT]
        self.line = 1

    @property
    def top(self) -> ScopeContext:
        return self.stack[-1]

    @property
    def depth(self) -> int:
        return len(self.stack)

    def feed(self, token: Token) -> Optional[ScopeContext]:
        """
        Потребляет очередной токен.

        Returns:
            Для литерального токена — контекст, которому он принадлежит.
            Для разделителя — закрытый им контекст или None, если
            разделитель открыл новый контекст или был поглощён комментарием.

        Raises:
            TemplateSyntaxError: Если разделитель недопустим в текущем контексте
        """
        self.line = token.line

        if token.type is TokenType.TEXT:
            return self.top

        key = (self.top, token.type)
        if key not in _TRANSITIONS:
            # Внутри комментария всё, кроме #}, поглощается
            if self.top is ScopeContext.COMMENT:
                return None
            raise TemplateSyntaxError(
                f"Unexpected '{token.value}' in {self.top.value}",
                self.template_name, token.line
            )

        target = _TRANSITIONS[key]
        if target is not None:
            self.stack.append(target)
            return None
        return self.stack.pop()

    def finish(self) -> None:
        """
        Проверяет, что стек вернулся к глубине 1.

        Raises:
            UnterminatedConstructError: Если ввод закончился внутри конструкции
        """
        if self.depth != 1:
            raise UnterminatedConstructError(
                f"Unexpected end of template inside {self.top.value}",
                self.template_name, self.line
            )


__all__ = ["ScopeContext", "ScopeAutomaton"]
