"""
Встроенные функции выражений.

Функции — обычные привязки глобальной области видимости и вызываются
синтаксисом `name(arg, ...)`.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List


def range_(*args: int) -> List[int]:
    """range(stop) / range(start, stop[, step]) в виде списка."""
    return list(range(*(int(a) for a in args)))


def len_(value: Any) -> int:
    return 0 if value is None else len(value)


def dict_(*pairs: Any) -> Dict[Any, Any]:
    """
    Создаёт словарь.

    dict() — пустой словарь; dict(mapping) — копия;
    dict(key, value, key, value, ...) — из пар аргументов.
    """
    if len(pairs) == 1:
        return dict(pairs[0])
    if len(pairs) % 2:
        raise ValueError("dict() expects a mapping or an even number of arguments")
    return {pairs[i]: pairs[i + 1] for i in range(0, len(pairs), 2)}


BUILTIN_FUNCTIONS: Dict[str, Callable[..., Any]] = {
    "range": range_,
    "len": len_,
    "dict": dict_,
}


__all__ = ["BUILTIN_FUNCTIONS"]
