"""
Лексические типы шаблонов.

Определяет шесть фиксированных разделителей и тип текстового токена.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TokenType(enum.Enum):
    """Типы токенов в шаблоне. Значение разделителя совпадает с его текстом."""

    # Директивы (теги)
    TAG_START = "{%"
    TAG_END = "%}"

    # Выражения вывода
    EXPR_START = "{{"
    EXPR_END = "}}"

    # Комментарии
    COMMENT_START = "{#"
    COMMENT_END = "#}"

    # Литеральный текст между разделителями
    TEXT = "TEXT"

    @property
    def is_delimiter(self) -> bool:
        return self is not TokenType.TEXT


# Разделители в порядке объявления, из них строится регулярное выражение
DELIMITERS = [t for t in TokenType if t.is_delimiter]

_BY_VALUE = {t.value: t for t in DELIMITERS}


def delimiter_type(value: str) -> TokenType:
    """Возвращает тип разделителя по его тексту или TEXT."""
    return _BY_VALUE.get(value, TokenType.TEXT)


@dataclass(frozen=True)
class Token:
    """
    Токен с номером строки для диагностики ошибок.
    """
    type: TokenType
    value: str
    line: int           # Номер строки (начиная с 1), на которой начинается токен

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, line={self.line})"


__all__ = ["TokenType", "Token", "DELIMITERS", "delimiter_type"]
