"""
Язык выражений шаблонов.

Лексер, AST, парсер с рекурсивным спуском (включая стадию фильтров
`expr | name: arg, arg`) и асинхронный вычислитель.
"""

from __future__ import annotations

from .errors import EvaluationError, ExpressionSyntaxError
from .evaluator import ExpressionEvaluator, UndefinedPolicy, evaluate_expression, stringify
from .lexer import ExpressionLexer
from .model import Expression, ExprType
from .parser import ExpressionParser, parse_expression

__all__ = [
    "ExpressionLexer",
    "ExpressionParser",
    "ExpressionEvaluator",
    "Expression",
    "ExprType",
    "ExpressionSyntaxError",
    "EvaluationError",
    "UndefinedPolicy",
    "evaluate_expression",
    "parse_expression",
    "stringify",
]
