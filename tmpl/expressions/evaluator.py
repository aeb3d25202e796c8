"""
Вычислитель выражений.

Асинхронно проходит по AST выражения и вычисляет его значение в цепочке
областей видимости. Любой результат вызова функции или фильтра, который
является awaitable, дожидается перед дальнейшим использованием.
"""

from __future__ import annotations

import enum
import inspect
import operator
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Dict, List, cast

from .errors import EvaluationError
from .model import (
    Attribute,
    Binary,
    Call,
    Compare,
    Conditional,
    DictExpr,
    Expression,
    ExprType,
    Filter,
    ListExpr,
    Literal,
    Logical,
    Name,
    Not,
    Subscript,
    Unary,
)
from ..errors import TmplUserError

if TYPE_CHECKING:
    from ..template.context import Scope


class UndefinedPolicy(enum.Enum):
    """Поведение при обращении к неопределённому имени или атрибуту."""
    STRICT = "strict"      # EvaluationError
    LENIENT = "lenient"    # None, который выводится как пустая строка

    @classmethod
    def parse(cls, value: Any) -> UndefinedPolicy:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"Invalid undefined policy '{value}' (expected one of: {allowed})")


_BINARY_OPS: Dict[str, Callable[[Any, Any], Any]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "//": operator.floordiv,
    "%": operator.mod,
}

_COMPARE_OPS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda left, right: left in right,
    "not in": lambda left, right: left not in right,
}

_MISSING = object()


def stringify(value: Any) -> str:
    """Превращает значение выражения в выводимый текст (None → пустая строка)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


async def _settle(value: Any) -> Any:
    """Дожидается значения, если оно awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


class ExpressionEvaluator:
    """
    Вычислитель выражений.

    Принимает AST выражения и область видимости, возвращает значение.
    """

    def __init__(self, scope: Scope, undefined: UndefinedPolicy = UndefinedPolicy.STRICT):
        """
        Инициализирует вычислитель.

        Args:
            scope: Цепочка областей видимости для поиска свободных имён
            undefined: Политика обработки неопределённых имён
        """
        self.scope = scope
        self.undefined = undefined

    async def evaluate(self, expr: Expression) -> Any:
        """
        Вычисляет значение выражения.

        Raises:
            EvaluationError: При ошибке вычисления
        """
        expr_type = expr.get_type()

        if expr_type == ExprType.LITERAL:
            return cast(Literal, expr).value
        elif expr_type == ExprType.NAME:
            return self._evaluate_name(cast(Name, expr))
        elif expr_type == ExprType.ATTRIBUTE:
            return await self._evaluate_attribute(cast(Attribute, expr))
        elif expr_type == ExprType.SUBSCRIPT:
            return await self._evaluate_subscript(cast(Subscript, expr))
        elif expr_type == ExprType.CALL:
            return await self._evaluate_call(cast(Call, expr))
        elif expr_type == ExprType.UNARY:
            return await self._evaluate_unary(cast(Unary, expr))
        elif expr_type == ExprType.BINARY:
            return await self._evaluate_binary(cast(Binary, expr))
        elif expr_type == ExprType.LOGICAL:
            return await self._evaluate_logical(cast(Logical, expr))
        elif expr_type == ExprType.NOT:
            return not await self.evaluate(cast(Not, expr).operand)
        elif expr_type == ExprType.COMPARE:
            return await self._evaluate_compare(cast(Compare, expr))
        elif expr_type == ExprType.CONDITIONAL:
            return await self._evaluate_conditional(cast(Conditional, expr))
        elif expr_type == ExprType.LIST:
            return [await self.evaluate(item) for item in cast(ListExpr, expr).items]
        elif expr_type == ExprType.DICT:
            return await self._evaluate_dict(cast(DictExpr, expr))
        elif expr_type == ExprType.FILTER:
            return await self._evaluate_filter(cast(Filter, expr))
        else:
            raise EvaluationError(f"Unknown expression type: {expr_type}")

    async def evaluate_text(self, expr: Expression) -> str:
        """Вычисляет выражение и превращает результат в текст."""
        return stringify(await self.evaluate(expr))

    # ======= Имена и доступ к членам =======

    def _undefined(self, description: str) -> Any:
        if self.undefined is UndefinedPolicy.STRICT:
            raise EvaluationError(f"{description} is undefined")
        return None

    def _evaluate_name(self, expr: Name) -> Any:
        found, value = self.scope.resolve(expr.name)
        if not found:
            return self._undefined(f"'{expr.name}'")
        return value

    async def _evaluate_attribute(self, expr: Attribute) -> Any:
        """
        Вычисляет доступ к члену: obj.name

        Для отображений проверяются только ключи, для остальных объектов атрибуты.
        """
        target = await self.evaluate(expr.target)
        if target is None and self.undefined is UndefinedPolicy.LENIENT:
            return None

        try:
            if isinstance(target, Mapping):
                value = target.get(expr.name, _MISSING)
            else:
                value = getattr(target, expr.name, _MISSING)
        except Exception as e:
            raise EvaluationError(f"Error reading attribute '{expr.name}' of {type(target).__name__}: {e}") from e

        if value is _MISSING:
            return self._undefined(f"Attribute '{expr.name}' of {type(target).__name__}")
        return value

    async def _evaluate_subscript(self, expr: Subscript) -> Any:
        target = await self.evaluate(expr.target)
        key = await self.evaluate(expr.key)
        if target is None and self.undefined is UndefinedPolicy.LENIENT:
            return None

        try:
            return target[key]
        except (KeyError, IndexError):
            return self._undefined(f"Item {key!r} of {type(target).__name__}")
        except TypeError as e:
            raise EvaluationError(f"Cannot subscript {type(target).__name__} with {key!r}: {e}") from e
        except Exception as e:
            raise EvaluationError(f"Error reading item {key!r} of {type(target).__name__}: {e}") from e

    async def _evaluate_dict(self, expr: DictExpr) -> Dict[Any, Any]:
        result: Dict[Any, Any] = {}
        for key_expr, value_expr in expr.items:
            key = await self.evaluate(key_expr)
            value = await self.evaluate(value_expr)
            try:
                result[key] = value
            except TypeError as e:
                raise EvaluationError(f"Invalid dictionary key {key!r}: {e}") from e
        return result

    # ======= Вызовы и фильтры =======

    async def _evaluate_call(self, expr: Call) -> Any:
        func = await self.evaluate(expr.func)
        if not callable(func):
            raise EvaluationError(f"'{expr.func}' is not callable")

        args = await self._evaluate_args(expr.args)
        return await self._invoke(func, args, f"function '{expr.func}'")

    async def _evaluate_filter(self, expr: Filter) -> Any:
        """
        Вычисляет стадию фильтра: value | name: arg, arg

        Фильтр берётся из отображения фильтров области видимости
        и вызывается как fn(value, *args).
        """
        fn = self.scope.filters.get(expr.name)
        if fn is None:
            raise EvaluationError(f"Unknown filter '{expr.name}'")

        value = await self.evaluate(expr.value)
        args = await self._evaluate_args(expr.args)
        return await self._invoke(fn, [value, *args], f"filter '{expr.name}'")

    async def _evaluate_args(self, args: List[Expression]) -> List[Any]:
        return [await self.evaluate(arg) for arg in args]

    @staticmethod
    async def _invoke(fn: Callable[..., Any], args: List[Any], description: str) -> Any:
        """Вызывает пользовательский код, оборачивая его ошибки в EvaluationError."""
        try:
            return await _settle(fn(*args))
        except TmplUserError:
            raise
        except Exception as e:
            raise EvaluationError(f"Error in {description}: {e}") from e

    # ======= Операторы =======

    async def _evaluate_unary(self, expr: Unary) -> Any:
        operand = await self.evaluate(expr.operand)
        try:
            return -operand if expr.operator == "-" else +operand
        except TypeError as e:
            raise EvaluationError(f"Bad operand for unary '{expr.operator}': {type(operand).__name__}") from e

    async def _evaluate_binary(self, expr: Binary) -> Any:
        left = await self.evaluate(expr.left)
        right = await self.evaluate(expr.right)

        if expr.operator == "~":
            return stringify(left) + stringify(right)

        try:
            return _BINARY_OPS[expr.operator](left, right)
        except (TypeError, ValueError, ZeroDivisionError) as e:
            raise EvaluationError(f"Cannot evaluate {expr}: {e}") from e

    async def _evaluate_logical(self, expr: Logical) -> Any:
        """
        Вычисляет логическое И/ИЛИ с коротким вычислением.

        Возвращает значение последнего вычисленного операнда.
        """
        left = await self.evaluate(expr.left)
        if expr.operator == "and":
            if not left:
                return left  # Короткое вычисление
        elif left:
            return left

        return await self.evaluate(expr.right)

    async def _evaluate_compare(self, expr: Compare) -> bool:
        left = await self.evaluate(expr.left)
        right = await self.evaluate(expr.right)
        try:
            return _COMPARE_OPS[expr.operator](left, right)
        except TypeError as e:
            raise EvaluationError(f"Cannot evaluate {expr}: {e}") from e

    async def _evaluate_conditional(self, expr: Conditional) -> Any:
        if await self.evaluate(expr.condition):
            return await self.evaluate(expr.body)
        return await self.evaluate(expr.orelse)


async def evaluate_expression(
    expr: Expression,
    scope: Scope,
    undefined: UndefinedPolicy = UndefinedPolicy.STRICT,
) -> Any:
    """
    Удобная функция для вычисления выражения.

    Args:
        expr: Корневой узел AST
        scope: Область видимости
        undefined: Политика обработки неопределённых имён

    Returns:
        Значение выражения
    """
    return await ExpressionEvaluator(scope, undefined).evaluate(expr)


__all__ = ["UndefinedPolicy", "ExpressionEvaluator", "evaluate_expression", "stringify"]
