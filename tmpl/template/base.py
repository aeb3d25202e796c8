"""
Базовые интерфейсы для плагинов тегов.

Плагин описывает одно семейство тегов: открывающие имена, признак
одиночности, имена внутренних тегов, разбор аргументов и рендеринг.
Построитель дерева знает о плагине только роль и семейство вхождения,
вся семантика управляющих конструкций живёт в самих плагинах.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Sequence

from .context import Scope
from .nodes import TagNode, TagRole
from .types import ChildrenRenderer, RenderResult

if TYPE_CHECKING:
    from ..engine import Environment


class TagPlugin(ABC):
    """
    Базовый интерфейс для плагинов тегов.

    Атрибуты класса:
        tag_names: Открывающие имена (роль START)
        inside_tag_names: Имена внутренних тегов (роль INSIDE)
        final_tag_names: Внутренние теги, после которых цепочка не продолжается
        singular: Одиночный тег — без закрывающего тега и без детей
        end_prefix: Префикс закрывающего имени ("end" + имя)
    """

    tag_names: Sequence[str] = ()
    inside_tag_names: Sequence[str] = ()
    final_tag_names: Sequence[str] = ()
    singular: bool = False
    end_prefix: str = "end"

    @property
    @abstractmethod
    def name(self) -> str:
        """Возвращает имя плагина — идентичность семейства тегов."""
        pass

    def end_tag_names(self) -> Sequence[str]:
        """Имена закрывающих тегов семейства."""
        if self.singular:
            return ()
        return [f"{self.end_prefix}{tag_name}" for tag_name in self.tag_names]

    def parse_args(self, tag_name: str, role: TagRole, signature: str) -> Any:
        """
        Разбирает сигнатуру вхождения тега.

        Вызывается ровно один раз при создании узла (кроме закрывающих
        тегов). По умолчанию возвращает сигнатуру как есть.

        Raises:
            Exception: Любая ошибка превращается построителем в MalformedTagError
        """
        return signature

    @abstractmethod
    async def render(
        self,
        node: TagNode,
        scope: Scope,
        env: "Environment",
        children: ChildrenRenderer,
    ) -> RenderResult:
        """
        Рендерит вхождение тега.

        Args:
            node: Узел тега с разобранными аргументами
            scope: Текущая область видимости
            env: Окружение движка (вычисление выражений, загрузчик)
            children: Рендерер детей узла

        Returns:
            Строка, Resolved или Deferred
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


__all__ = ["TagPlugin"]
