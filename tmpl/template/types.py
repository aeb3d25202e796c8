"""
Типы результатов рендеринга и протокол рендеринга детей.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

from .nodes import TemplateNode
from .context import Scope


@dataclass(frozen=True)
class Resolved:
    """Окончательно вычисленный текст узла."""
    text: str


@dataclass(frozen=True)
class Deferred:
    """
    Отложенный результат: функция от селектора к тексту.

    Движок вызывает её с селектором, который родитель узла передал
    в apply(). Функция может быть как обычной, так и асинхронной.
    """
    pick: Callable[[Any], Union[str, Awaitable[str]]]

    async def resolve(self, selector: Any) -> str:
        result = self.pick(selector)
        if inspect.isawaitable(result):
            result = await result
        if not isinstance(result, str):
            raise TypeError(f"Deferred render must produce str, got {type(result).__name__}")
        return result


# Результат render() плагина: голая строка трактуется как Resolved
RenderResult = Union[Resolved, Deferred, str]

# Предикат отбора детей для частичного рендеринга
ChildFilter = Callable[[TemplateNode], bool]


class ChildrenRenderer(Protocol):
    """
    Замыкание, рендерящее всех детей узла в порядке документа.

    Args:
        scope: Область видимости для детей
        selector: Селектор, передаваемый каждому ребёнку
        include: Необязательный предикат — рендерить только подходящих детей
    """

    def __call__(
        self,
        scope: Scope,
        selector: Any = None,
        include: Optional[ChildFilter] = None,
    ) -> Awaitable[str]:
        ...


__all__ = ["Resolved", "Deferred", "RenderResult", "ChildFilter", "ChildrenRenderer"]
