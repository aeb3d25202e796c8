"""
Область видимости рендеринга.

Явная неизменяемая цепочка поиска: словарь привязок листа плюс
необязательная ссылка на родительскую область. Поиск при промахе
уходит к родителю; дочерняя область никогда не изменяет привязки
родителя.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

# Зарезервированный ключ глобальной области, под которым лежат фильтры
FILTERS_KEY = "__filters__"

_MISSING = object()


class Scope:
    """
    Звено цепочки областей видимости.

    Каждый вложенный контекст рендеринга (итерация цикла, блок with,
    включённый шаблон) получает собственную дочернюю область.
    """

    __slots__ = ("_bindings", "parent")

    def __init__(self, bindings: Optional[Mapping[str, Any]] = None, parent: Optional[Scope] = None):
        self._bindings: Mapping[str, Any] = MappingProxyType(dict(bindings or {}))
        self.parent = parent

    @property
    def bindings(self) -> Mapping[str, Any]:
        """Привязки только этого звена (только для чтения)."""
        return self._bindings

    def resolve(self, name: str) -> Tuple[bool, Any]:
        """
        Ищет имя по цепочке.

        Returns:
            Пара (найдено, значение)
        """
        scope: Optional[Scope] = self
        while scope is not None:
            value = scope._bindings.get(name, _MISSING)
            if value is not _MISSING:
                return True, value
            scope = scope.parent
        return False, None

    def lookup(self, name: str, default: Any = _MISSING) -> Any:
        """
        Возвращает значение имени.

        Raises:
            KeyError: Если имя не найдено и default не задан
        """
        found, value = self.resolve(name)
        if found:
            return value
        if default is _MISSING:
            raise KeyError(name)
        return default

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name)[0]

    def child(self, bindings: Optional[Mapping[str, Any]] = None) -> Scope:
        """Создаёт дочернюю область поверх текущей."""
        return Scope(bindings, parent=self)

    @property
    def filters(self) -> Mapping[str, Any]:
        """Отображение фильтров, видимое из этой области."""
        found, filters = self.resolve(FILTERS_KEY)
        return filters if found and isinstance(filters, Mapping) else {}

    def chain(self) -> Iterator[Scope]:
        """Итерирует звенья от листа к корню."""
        scope: Optional[Scope] = self
        while scope is not None:
            yield scope
            scope = scope.parent

    def flatten(self) -> Dict[str, Any]:
        """Сводит цепочку в один словарь (ближние привязки побеждают)."""
        result: Dict[str, Any] = {}
        for scope in reversed(list(self.chain())):
            result.update(scope._bindings)
        return result

    def __repr__(self) -> str:
        depth = sum(1 for _ in self.chain())
        return f"Scope(keys={sorted(self._bindings)}, depth={depth})"


__all__ = ["FILTERS_KEY", "Scope"]
