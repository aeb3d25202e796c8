"""
Реестр тегов.

Сопоставляет имена тегов маршрутам (плагин, роль). Это единственная
точка расширения управляющих конструкций: построитель дерева получает
из реестра только роль и семейство тега.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from .base import TagPlugin
from .nodes import TagRole
from ..errors import UnknownTagError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagRoute:
    """Маршрут имени тега."""
    plugin: TagPlugin
    role: TagRole

    @property
    def family(self) -> str:
        return self.plugin.name


class TagRegistry:
    """
    Централизованный реестр плагинов тегов.

    При регистрации выводит маршруты: каждое открывающее имя → START,
    "end" + имя → END (если тег не одиночный), каждое внутреннее имя → INSIDE.
    """

    def __init__(self):
        """Инициализирует реестр."""
        self.routes: Dict[str, TagRoute] = {}
        self.plugins: Dict[str, TagPlugin] = {}

    def add_tag(self, plugin: TagPlugin) -> None:
        """
        Регистрирует плагин и все его маршруты.

        Args:
            plugin: Плагин для регистрации

        Raises:
            ValueError: Если плагин с таким именем уже зарегистрирован
                или у плагина нет открывающих имён
        """
        if plugin.name in self.plugins:
            raise ValueError(f"Tag plugin '{plugin.name}' already registered")
        if not plugin.tag_names:
            raise ValueError(f"Tag plugin '{plugin.name}' declares no tag names")

        self.plugins[plugin.name] = plugin

        for tag_name in plugin.tag_names:
            self._add_route(tag_name, TagRoute(plugin, TagRole.START))
        for tag_name in plugin.end_tag_names():
            self._add_route(tag_name, TagRoute(plugin, TagRole.END))
        for tag_name in plugin.inside_tag_names:
            self._add_route(tag_name, TagRoute(plugin, TagRole.INSIDE))

        logger.debug(f"Registered tag plugin '{plugin.name}'")

    def _add_route(self, tag_name: str, route: TagRoute) -> None:
        existing = self.routes.get(tag_name)
        if existing is not None:
            logger.warning(
                f"Tag '{tag_name}' from plugin '{route.family}' "
                f"overwrites existing route of plugin '{existing.family}'"
            )
        self.routes[tag_name] = route

    def get(self, tag_name: str) -> Optional[TagRoute]:
        return self.routes.get(tag_name)

    def route(self, tag_name: str, template_name: str = "(string)", line: Optional[int] = None) -> TagRoute:
        """
        Возвращает маршрут тега.

        Raises:
            UnknownTagError: Если имя не зарегистрировано
        """
        route = self.routes.get(tag_name)
        if route is None:
            raise UnknownTagError(f"Unknown tag '{tag_name}'", template_name, line)
        return route

    def names(self) -> List[str]:
        return sorted(self.routes)

    def __iter__(self) -> Iterator[TagPlugin]:
        return iter(self.plugins.values())

    def __contains__(self, tag_name: object) -> bool:
        return tag_name in self.routes


__all__ = ["TagRoute", "TagRegistry"]
