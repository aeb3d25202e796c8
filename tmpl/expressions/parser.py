"""
Парсер выражений с рекурсивным спуском.

Строит абстрактное синтаксическое дерево (AST) из последовательности токенов.
Поддерживает приоритеты операторов, группировку в скобках и
левоассоциативную стадию фильтров.

Грамматика:
pipeline    → conditional ("|" NAME (":" conditional ("," conditional)*)?)*
conditional → or_expr ("if" or_expr "else" conditional)?
or_expr     → and_expr (("or" | "||") and_expr)*
and_expr    → not_expr (("and" | "&&") not_expr)*
not_expr    → ("not" | "!") not_expr | comparison
comparison  → additive (("==" | "!=" | "<" | "<=" | ">" | ">=" | "in" | "not" "in") additive)*
additive    → term (("+" | "-" | "~") term)*
term        → unary (("*" | "/" | "//" | "%") unary)*
unary       → ("-" | "+") unary | postfix
postfix     → primary ("." NAME | "[" pipeline "]" | "(" arguments? ")")*
primary     → NUMBER | STRING | "true" | "false" | "null" | "none" | NAME
            | "(" pipeline ")" | "[" items? "]" | "{" pairs? "}"
"""

from __future__ import annotations

from typing import List, Tuple

from .errors import ExpressionSyntaxError
from .lexer import ExpressionLexer, Token
from .model import (
    Attribute,
    Binary,
    Call,
    Compare,
    Conditional,
    DictExpr,
    Expression,
    Filter,
    ListExpr,
    Literal,
    Logical,
    Name,
    Not,
    Subscript,
    Unary,
)

_COMPARISON_OPS = ("==", "!=", "<", "<=", ">", ">=")
_ADDITIVE_OPS = ("+", "-", "~")
_TERM_OPS = ("*", "/", "//", "%")
_CONSTANTS = {"true": True, "false": False, "null": None, "none": None}


class ExpressionParser:
    """
    Парсер выражений с рекурсивным спуском.

    Преобразует список токенов в абстрактное синтаксическое дерево,
    соблюдая приоритеты операторов и правила группировки.
    """

    def __init__(self):
        self.lexer = ExpressionLexer()
        self._tokens: List[Token] = []
        self._position = 0

    def parse(self, source: str) -> Expression:
        """
        Парсит строку выражения в AST.

        Args:
            source: Строка выражения

        Returns:
            Корневой узел AST

        Raises:
            ExpressionSyntaxError: При синтаксической ошибке
        """
        self._tokens = self.lexer.tokenize(source)
        self._position = 0

        if self._is_at_end():
            raise ExpressionSyntaxError("Empty expression", 0)

        result = self._parse_pipeline()

        # Проверяем, что мы достигли конца входных данных
        if not self._is_at_end():
            current = self._current_token()
            raise ExpressionSyntaxError(f"Unexpected token '{current.value}'", current.position)

        return result

    def _parse_pipeline(self) -> Expression:
        """Парсит цепочку фильтров (низший приоритет, левая ассоциативность)."""
        value = self._parse_conditional()

        while self._match_op("|"):
            name_token = self._consume_name("Expected filter name after '|'")
            args: List[Expression] = []
            if self._match_op(":"):
                args.append(self._parse_conditional())
                while self._match_op(","):
                    args.append(self._parse_conditional())
            value = Filter(value=value, name=name_token.value, args=args)

        return value

    def _parse_conditional(self) -> Expression:
        """Парсит условное выражение: body if condition else orelse."""
        body = self._parse_or_expression()

        if self._match_keyword("if"):
            condition = self._parse_or_expression()
            if not self._match_keyword("else"):
                raise ExpressionSyntaxError("Expected 'else' in conditional expression", self._current_position())
            orelse = self._parse_conditional()
            return Conditional(body=body, condition=condition, orelse=orelse)

        return body

    def _parse_or_expression(self) -> Expression:
        """Парсит выражение с оператором or."""
        left = self._parse_and_expression()

        while self._match_keyword("or") or self._match_op("||"):
            right = self._parse_and_expression()
            left = Logical(left=left, right=right, operator="or")

        return left

    def _parse_and_expression(self) -> Expression:
        """Парсит выражение с оператором and."""
        left = self._parse_not_expression()

        while self._match_keyword("and") or self._match_op("&&"):
            right = self._parse_not_expression()
            left = Logical(left=left, right=right, operator="and")

        return left

    def _parse_not_expression(self) -> Expression:
        """Парсит выражение с оператором not (правая ассоциативность)."""
        if self._match_keyword("not") or self._match_op("!"):
            return Not(operand=self._parse_not_expression())

        return self._parse_comparison()

    def _parse_comparison(self) -> Expression:
        """Парсит сравнения, включая in и not in."""
        left = self._parse_additive()

        while True:
            current = self._current_token()
            if current.type == 'OP' and current.value in _COMPARISON_OPS:
                self._advance()
                operator = current.value
            elif self._match_keyword("in"):
                operator = "in"
            elif self._check_keyword("not") and self._peek_keyword("in"):
                self._advance()
                self._advance()
                operator = "not in"
            else:
                return left

            right = self._parse_additive()
            left = Compare(left=left, right=right, operator=operator)

    def _parse_additive(self) -> Expression:
        """Парсит сложение, вычитание и конкатенацию."""
        left = self._parse_term()

        while True:
            current = self._current_token()
            if current.type != 'OP' or current.value not in _ADDITIVE_OPS:
                return left
            self._advance()
            right = self._parse_term()
            left = Binary(left=left, right=right, operator=current.value)

    def _parse_term(self) -> Expression:
        """Парсит умножение, деление и остаток."""
        left = self._parse_unary()

        while True:
            current = self._current_token()
            if current.type != 'OP' or current.value not in _TERM_OPS:
                return left
            self._advance()
            right = self._parse_unary()
            left = Binary(left=left, right=right, operator=current.value)

    def _parse_unary(self) -> Expression:
        """Парсит унарные + и -."""
        current = self._current_token()
        if current.type == 'OP' and current.value in ("-", "+"):
            self._advance()
            return Unary(operator=current.value, operand=self._parse_unary())

        return self._parse_postfix()

    def _parse_postfix(self) -> Expression:
        """Парсит доступ к членам, индексам и вызовы."""
        expr = self._parse_primary()

        while True:
            if self._match_op("."):
                name_token = self._consume_name("Expected attribute name after '.'")
                expr = Attribute(target=expr, name=name_token.value)
            elif self._match_op("["):
                key = self._parse_pipeline()
                self._expect_op("]", "Expected ']' after index")
                expr = Subscript(target=expr, key=key)
            elif self._match_op("("):
                args = self._parse_sequence(")")
                expr = Call(func=expr, args=args)
            else:
                return expr

    def _parse_primary(self) -> Expression:
        """Парсит первичное выражение (литералы, имена и группы в скобках)."""
        current = self._current_token()

        if current.type == 'NUMBER':
            self._advance()
            text = current.value
            if "." in text or "e" in text or "E" in text:
                return Literal(float(text))
            return Literal(int(text))

        if current.type == 'STRING':
            self._advance()
            return Literal(current.value)

        if current.type == 'KEYWORD' and current.value in _CONSTANTS:
            self._advance()
            return Literal(_CONSTANTS[current.value])

        if current.type == 'NAME':
            self._advance()
            return Name(current.value)

        # Группировка в скобках
        if self._match_op("("):
            expr = self._parse_pipeline()
            self._expect_op(")", "Expected ')' after grouped expression")
            return expr

        if self._match_op("["):
            return ListExpr(items=self._parse_sequence("]"))

        if self._match_op("{"):
            return DictExpr(items=self._parse_pairs())

        if current.type == 'EOF':
            raise ExpressionSyntaxError("Unexpected end of expression", current.position)
        raise ExpressionSyntaxError(f"Unexpected token '{current.value}'", current.position)

    def _parse_sequence(self, closing: str) -> List[Expression]:
        """Парсит элементы через запятую до закрывающего символа."""
        items: List[Expression] = []
        if self._match_op(closing):
            return items

        items.append(self._parse_pipeline())
        while self._match_op(","):
            # Допускаем висячую запятую
            if self._check_op(closing):
                break
            items.append(self._parse_pipeline())

        self._expect_op(closing, f"Expected '{closing}'")
        return items

    def _parse_pairs(self) -> List[Tuple[Expression, Expression]]:
        """Парсит пары ключ: значение литерала словаря."""
        pairs: List[Tuple[Expression, Expression]] = []
        if self._match_op("}"):
            return pairs

        while True:
            key = self._parse_conditional()
            self._expect_op(":", "Expected ':' after dictionary key")
            value = self._parse_pipeline()
            pairs.append((key, value))
            if not self._match_op(","):
                break
            if self._check_op("}"):
                break

        self._expect_op("}", "Expected '}'")
        return pairs

    # Вспомогательные методы для работы с токенами

    def _current_token(self) -> Token:
        """Возвращает текущий токен без продвижения позиции."""
        if self._position >= len(self._tokens):
            return self._tokens[-1]
        return self._tokens[self._position]

    def _current_position(self) -> int:
        """Возвращает текущую позицию в исходной строке."""
        return self._current_token().position

    def _is_at_end(self) -> bool:
        """Проверяет, достигли ли мы конца токенов."""
        return self._current_token().type == 'EOF'

    def _advance(self) -> Token:
        """Продвигает позицию и возвращает предыдущий токен."""
        current = self._current_token()
        if not self._is_at_end():
            self._position += 1
        return current

    def _check_keyword(self, keyword: str) -> bool:
        current = self._current_token()
        return current.type == 'KEYWORD' and current.value == keyword

    def _peek_keyword(self, keyword: str) -> bool:
        if self._position + 1 >= len(self._tokens):
            return False
        token = self._tokens[self._position + 1]
        return token.type == 'KEYWORD' and token.value == keyword

    def _match_keyword(self, keyword: str) -> bool:
        """Проверяет и потребляет ключевое слово."""
        if self._check_keyword(keyword):
            self._advance()
            return True
        return False

    def _check_op(self, op: str) -> bool:
        current = self._current_token()
        return current.type == 'OP' and current.value == op

    def _match_op(self, op: str) -> bool:
        """Проверяет и потребляет оператор."""
        if self._check_op(op):
            self._advance()
            return True
        return False

    def _expect_op(self, op: str, error_message: str) -> None:
        if not self._match_op(op):
            raise ExpressionSyntaxError(error_message, self._current_position())

    def _consume_name(self, error_message: str) -> Token:
        """Потребляет идентификатор или выбрасывает ошибку."""
        current = self._current_token()
        if current.type == 'NAME':
            return self._advance()

        raise ExpressionSyntaxError(error_message, current.position)


def parse_expression(source: str) -> Expression:
    """
    Удобная функция для разбора выражения из строки.

    Единая грамматика, которую переиспользуют аргументы тегов.
    """
    return ExpressionParser().parse(source)


__all__ = ["ExpressionParser", "parse_expression"]
