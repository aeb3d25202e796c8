"""
Лексер для разбора выражений.

Выполняет токенизацию строки выражения, разбивая её на значимые элементы:
- Числа и строковые литералы
- Ключевые слова (and, or, not, in, if, else, true, false, null, none)
- Идентификаторы (имена переменных, функций, фильтров)
- Операторы и знаки пунктуации (включая | для фильтров)
- Пробелы (игнорируются)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from .errors import ExpressionSyntaxError


@dataclass
class Token:
    """
    Токен для парсинга выражений.

    Attributes:
        type: Тип токена (NUMBER, STRING, KEYWORD, NAME, OP, EOF)
        value: Значение токена (для STRING — уже раскодированное)
        position: Позиция в исходной строке
    """
    type: str
    value: str
    position: int

    def __repr__(self):
        return f"Token({self.type}, '{self.value}', pos={self.position})"


_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", "'": "'", '"': '"', "0": "\0"}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def _unquote(literal: str) -> str:
    """Снимает кавычки и раскрывает escape-последовательности."""
    body = literal[1:-1]
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


class ExpressionLexer:
    """
    Лексер для разбиения строки выражения на токены.
    """

    # Спецификация токенов: (regex_pattern, token_type, ignore_flag)
    TOKEN_SPECS = [
        # Пробелы, табуляция и переводы строк (игнорируем)
        (r'\s+', 'WHITESPACE', True),

        # Числа: целые, дробные, с экспонентой
        (r'\d+\.\d+(?:[eE][+-]?\d+)?|\d+(?:[eE][+-]?\d+)?', 'NUMBER', False),

        # Строки в одинарных или двойных кавычках
        (r'"(?:[^"\\]|\\.)*"|\'(?:[^\'\\]|\\.)*\'', 'STRING', False),

        # Многосимвольные операторы проверяем перед односимвольными
        (r'//|==|!=|<=|>=|&&|\|\||[-+*/%~<>!|:,.()\[\]{}]', 'OP', False),

        # Идентификаторы; ключевые слова определяем после захвата
        (r'[A-Za-z_][A-Za-z0-9_]*', 'NAME', False),

        # Неизвестный символ (ошибка)
        (r'.', 'UNKNOWN', False),
    ]

    # Ключевые слова для постпроцессинга
    KEYWORDS = {
        'and', 'or', 'not', 'in', 'if', 'else', 'true', 'false', 'null', 'none',
    }

    def __init__(self):
        # Компилируем регулярные выражения один раз
        self._compiled_patterns = [
            (re.compile(pattern, re.DOTALL), token_type, ignore)
            for pattern, token_type, ignore in self.TOKEN_SPECS
        ]

    def tokenize(self, text: str) -> List[Token]:
        """
        Разбивает строку на токены.

        Args:
            text: Строка выражения

        Returns:
            Список токенов, завершающийся EOF

        Raises:
            ExpressionSyntaxError: При встрече неизвестного символа
        """
        tokens: List[Token] = []
        position = 0

        while position < len(text):
            for pattern, token_type, ignore in self._compiled_patterns:
                match = pattern.match(text, position)
                if not match:
                    continue

                value = match.group(0)
                if token_type == 'UNKNOWN':
                    raise ExpressionSyntaxError(f"Unexpected character '{value}'", position)

                if not ignore:
                    if token_type == 'NAME' and value in self.KEYWORDS:
                        tokens.append(Token('KEYWORD', value, position))
                    elif token_type == 'STRING':
                        tokens.append(Token('STRING', _unquote(value), position))
                    else:
                        tokens.append(Token(token_type, value, position))

                position = match.end()
                break

        tokens.append(Token('EOF', '', position))
        return tokens


__all__ = ["Token", "ExpressionLexer"]
