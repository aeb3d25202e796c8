"""
Лексический анализатор шаблонов.

Разбивает исходный текст за один проход на литеральные фрагменты и
шесть фиксированных разделителей ({% %}, {{ }}, {# #}), отслеживая
номера строк для диагностики.
"""

from __future__ import annotations

import re
from typing import Iterator, List

from .tokens import DELIMITERS, Token, TokenType, delimiter_type

# Регулярное выражение для всех разделителей сразу
_DELIMITER_RE = re.compile("|".join(re.escape(t.value) for t in DELIMITERS))


class TemplateLexer:
    """
    Лексический анализатор шаблонов.

    Поток токенов однонаправленный и не перезапускаемый: повторная
    итерация по тому же лексеру не допускается. Номер строки токена
    вычисляется по накопленному количеству переводов строк и указывает
    на строку, где токен начинается (для ошибок внутри длинного
    фрагмента это приближение).
    """

    def __init__(self, text: str, template_name: str = "(string)"):
        self.text = text
        self.template_name = template_name
        self.line = 1
        self._consumed = False

    def __iter__(self) -> Iterator[Token]:
        if self._consumed:
            raise RuntimeError(f"Token stream of '{self.template_name}' was already consumed")
        self._consumed = True
        return self._scan()

    def _scan(self) -> Iterator[Token]:
        position = 0
        for match in _DELIMITER_RE.finditer(self.text):
            start, end = match.span()
            if start > position:
                yield self._emit(TokenType.TEXT, self.text[position:start])
            yield self._emit(delimiter_type(match.group(0)), match.group(0))
            position = end

        # Хвост после последнего разделителя
        if position < len(self.text):
            yield self._emit(TokenType.TEXT, self.text[position:])

    def _emit(self, token_type: TokenType, value: str) -> Token:
        token = Token(token_type, value, self.line)
        self.line += value.count("\n")
        return token


def tokenize_template(text: str, template_name: str = "(string)") -> List[Token]:
    """
    Удобная функция для токенизации шаблона.

    Args:
        text: Исходный текст шаблона
        template_name: Имя шаблона для диагностики

    Returns:
        Список токенов
    """
    return list(TemplateLexer(text, template_name))


__all__ = ["TemplateLexer", "tokenize_template"]
