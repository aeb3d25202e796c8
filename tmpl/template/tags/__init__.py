"""
Встроенные плагины тегов.

Все они — обычные TagPlugin и регистрируются окружением так же,
как пользовательские теги.
"""

from __future__ import annotations

from typing import List

from .apply import ApplyTag
from .conditional import IfTag
from .include import IncludeTag
from .loop import ForTag, LoopInfo
from .scoping import WithTag
from .switch import SwitchTag
from ..base import TagPlugin


def builtin_tags() -> List[TagPlugin]:
    """Создаёт экземпляры всех встроенных плагинов."""
    return [IfTag(), SwitchTag(), ForTag(), WithTag(), ApplyTag(), IncludeTag()]


__all__ = [
    "IfTag",
    "SwitchTag",
    "ForTag",
    "LoopInfo",
    "WithTag",
    "ApplyTag",
    "IncludeTag",
    "builtin_tags",
]
