"""
Встроенные фильтры.

Фильтр — обычная функция fn(value, *args). Окружение кладёт их в
зарезервированное отображение __filters__ глобальной области видимости,
откуда их находит стадия `value | name: arg, arg`.
"""

from __future__ import annotations

import html
from collections.abc import Mapping, Sized
from typing import Any, Callable, Dict, Iterable, List, Optional

from .expressions import stringify


def default(value: Any, fallback: Any = "", boolean: bool = False) -> Any:
    """Возвращает fallback для None (или для любого ложного значения при boolean=true)."""
    if value is None or (boolean and not value):
        return fallback
    return value


def upper(value: Any) -> str:
    return stringify(value).upper()


def lower(value: Any) -> str:
    return stringify(value).lower()


def capitalize(value: Any) -> str:
    return stringify(value).capitalize()


def title(value: Any) -> str:
    return stringify(value).title()


def trim(value: Any, chars: Optional[str] = None) -> str:
    return stringify(value).strip(chars)


def length(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, Sized):
        return len(value)
    return len(stringify(value))


def join(value: Iterable[Any], separator: str = "", attribute: Optional[str] = None) -> str:
    items: Iterable[Any] = value or []
    if attribute is not None:
        items = (_get(item, attribute) for item in items)
    return str(separator).join(stringify(item) for item in items)


def first(value: Any) -> Any:
    for item in value or ():
        return item
    return None


def last(value: Any) -> Any:
    items = list(value or ())
    return items[-1] if items else None


def replace(value: Any, old: str, new: str, count: Optional[int] = None) -> str:
    text = stringify(value)
    if count is None:
        return text.replace(old, new)
    return text.replace(old, new, int(count))


def escape(value: Any) -> str:
    """Экранирует HTML-спецсимволы (включая кавычки)."""
    return html.escape(stringify(value), quote=True)


def to_int(value: Any, fallback: int = 0) -> int:
    """Приводит к целому; при неудаче возвращает fallback."""
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return fallback


def to_float(value: Any, fallback: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return fallback


def string(value: Any) -> str:
    return stringify(value)


def reverse(value: Any) -> Any:
    if isinstance(value, str):
        return value[::-1]
    return list(reversed(list(value or ())))


def sort(value: Iterable[Any], reverse: bool = False, attribute: Optional[str] = None) -> List[Any]:
    if attribute is None:
        return sorted(value or (), reverse=bool(reverse))
    return sorted(value or (), key=lambda item: _get(item, attribute), reverse=bool(reverse))


def _get(item: Any, attribute: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(attribute)
    return getattr(item, attribute, None)


BUILTIN_FILTERS: Dict[str, Callable[..., Any]] = {
    "default": default,
    "upper": upper,
    "lower": lower,
    "capitalize": capitalize,
    "title": title,
    "trim": trim,
    "length": length,
    "join": join,
    "first": first,
    "last": last,
    "replace": replace,
    "escape": escape,
    "int": to_int,
    "float": to_float,
    "string": string,
    "reverse": reverse,
    "sort": sort,
}


__all__ = ["BUILTIN_FILTERS"]
