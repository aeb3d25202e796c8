"""
Модели данных для выражений.

Содержит классы для представления узлов AST выражений, включая
стадию фильтра (pipe) `expr | name: arg, arg`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Tuple


class ExprType(Enum):
    """Типы узлов выражений."""
    LITERAL = "literal"
    NAME = "name"
    ATTRIBUTE = "attribute"
    SUBSCRIPT = "subscript"
    CALL = "call"
    UNARY = "unary"
    BINARY = "binary"
    LOGICAL = "logical"
    NOT = "not"
    COMPARE = "compare"
    CONDITIONAL = "conditional"
    LIST = "list"
    DICT = "dict"
    FILTER = "filter"


@dataclass
class Expression(ABC):
    """Базовый абстрактный класс для всех узлов выражений."""

    @abstractmethod
    def get_type(self) -> ExprType:
        """Возвращает тип узла."""
        pass

    def __str__(self) -> str:
        """Строковое представление выражения."""
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        """Внутренний метод для создания строкового представления."""
        pass


@dataclass
class Literal(Expression):
    """Литерал: число, строка, true/false, null."""
    value: Any

    def get_type(self) -> ExprType:
        return ExprType.LITERAL

    def _to_string(self) -> str:
        return repr(self.value)


@dataclass
class Name(Expression):
    """Свободный идентификатор, разрешаемый через цепочку областей видимости."""
    name: str

    def get_type(self) -> ExprType:
        return ExprType.NAME

    def _to_string(self) -> str:
        return self.name


@dataclass
class Attribute(Expression):
    """Доступ к члену: obj.name"""
    target: Expression
    name: str

    def get_type(self) -> ExprType:
        return ExprType.ATTRIBUTE

    def _to_string(self) -> str:
        return f"{self.target}.{self.name}"


@dataclass
class Subscript(Expression):
    """Доступ по индексу: obj[key]"""
    target: Expression
    key: Expression

    def get_type(self) -> ExprType:
        return ExprType.SUBSCRIPT

    def _to_string(self) -> str:
        return f"{self.target}[{self.key}]"


@dataclass
class Call(Expression):
    """Вызов: func(arg, ...)"""
    func: Expression
    args: List[Expression] = field(default_factory=list)

    def get_type(self) -> ExprType:
        return ExprType.CALL

    def _to_string(self) -> str:
        return f"{self.func}({', '.join(str(a) for a in self.args)})"


@dataclass
class Unary(Expression):
    """Унарный арифметический оператор: -x, +x"""
    operator: str
    operand: Expression

    def get_type(self) -> ExprType:
        return ExprType.UNARY

    def _to_string(self) -> str:
        return f"{self.operator}{self.operand}"


@dataclass
class Binary(Expression):
    """
    Бинарная арифметическая операция: left op right

    Поддерживаемые операторы: + - * / // % и ~ (конкатенация строк).
    """
    left: Expression
    right: Expression
    operator: str

    def get_type(self) -> ExprType:
        return ExprType.BINARY

    def _to_string(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass
class Logical(Expression):
    """
    Логическая операция с коротким вычислением: left and/or right

    Возвращает значение одного из операндов, а не булево значение.
    """
    left: Expression
    right: Expression
    operator: str  # "and" или "or"

    def get_type(self) -> ExprType:
        return ExprType.LOGICAL

    def _to_string(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass
class Not(Expression):
    """Отрицание: not x"""
    operand: Expression

    def get_type(self) -> ExprType:
        return ExprType.NOT

    def _to_string(self) -> str:
        return f"not {self.operand}"


@dataclass
class Compare(Expression):
    """Сравнение: left op right, где op — ==, !=, <, <=, >, >=, in, not in"""
    left: Expression
    right: Expression
    operator: str

    def get_type(self) -> ExprType:
        return ExprType.COMPARE

    def _to_string(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass
class Conditional(Expression):
    """Условное выражение: body if condition else orelse"""
    body: Expression
    condition: Expression
    orelse: Expression

    def get_type(self) -> ExprType:
        return ExprType.CONDITIONAL

    def _to_string(self) -> str:
        return f"({self.body} if {self.condition} else {self.orelse})"


@dataclass
class ListExpr(Expression):
    """Литерал списка: [a, b, c]"""
    items: List[Expression] = field(default_factory=list)

    def get_type(self) -> ExprType:
        return ExprType.LIST

    def _to_string(self) -> str:
        return f"[{', '.join(str(i) for i in self.items)}]"


@dataclass
class DictExpr(Expression):
    """Литерал словаря: {key: value, ...}"""
    items: List[Tuple[Expression, Expression]] = field(default_factory=list)

    def get_type(self) -> ExprType:
        return ExprType.DICT

    def _to_string(self) -> str:
        return "{" + ", ".join(f"{k}: {v}" for k, v in self.items) + "}"


@dataclass
class Filter(Expression):
    """
    Стадия фильтра: value | name: arg, arg

    Фильтр ищется в зарезервированном отображении фильтров области
    видимости и вызывается со значением value и перечисленными аргументами.
    Цепочки фильтров левоассоциативны.
    """
    value: Expression
    name: str
    args: List[Expression] = field(default_factory=list)

    def get_type(self) -> ExprType:
        return ExprType.FILTER

    def _to_string(self) -> str:
        if not self.args:
            return f"{self.value} | {self.name}"
        return f"{self.value} | {self.name}: {', '.join(str(a) for a in self.args)}"


__all__ = [
    "ExprType",
    "Expression",
    "Literal",
    "Name",
    "Attribute",
    "Subscript",
    "Call",
    "Unary",
    "Binary",
    "Logical",
    "Not",
    "Compare",
    "Conditional",
    "ListExpr",
    "DictExpr",
    "Filter",
]
