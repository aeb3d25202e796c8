"""
Окружение шаблонов — публичный API движка.

Объединяет реестр тегов, фильтры, функции, загрузчик и настройки
в один объект. Каждый вызов render/render_string строит собственное
дерево и собственную цепочку областей видимости, поэтому конкурентные
рендеры не разделяют изменяемого состояния.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .config import EngineConfig
from .errors import LoadError, TmplUserError
from .expressions import Expression, ExpressionEvaluator, stringify
from .filters import BUILTIN_FILTERS
from .functions import BUILTIN_FUNCTIONS
from .loader import FileSystemLoader, Loader
from .template.base import TagPlugin
from .template.context import FILTERS_KEY, Scope
from .template.nodes import TemplateTree
from .template.parser import TreeBuilder
from .template.processor import TemplateRenderer
from .template.registry import TagRegistry
from .template.tags import builtin_tags

logger = logging.getLogger(__name__)


class Environment:
    """
    Окружение для разбора и рендеринга шаблонов.

    Пример:
        env = Environment(search_path="templates")
        env.add_filter("shout", lambda s: s.upper() + "!")
        text = await env.render("page.html", {"user": "Ann"})
    """

    def __init__(
        self,
        search_path: Optional[Union[str, Path]] = None,
        loader: Optional[Loader] = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Args:
            search_path: Корень файлового загрузчика (перекрывает config.search_path)
            loader: Собственный загрузчик `(template_id, base) -> str`
            config: Настройки движка
        """
        config = config or EngineConfig()
        if search_path is not None:
            config = replace(config, search_path=str(search_path))
        self.config = config
        self.undefined = config.undefined_policy

        self.loader: Loader = loader or FileSystemLoader(
            config.search_path, encoding=config.encoding, suffix=config.suffix
        )

        self.registry = TagRegistry()
        for plugin in builtin_tags():
            self.registry.add_tag(plugin)

        self.filters: Dict[str, Callable[..., Any]] = dict(BUILTIN_FILTERS)
        self.functions: Dict[str, Callable[..., Any]] = dict(BUILTIN_FUNCTIONS)

    # ======= Расширение =======

    def add_tag(self, plugin: TagPlugin) -> None:
        """Регистрирует плагин тега (см. TagRegistry.add_tag)."""
        self.registry.add_tag(plugin)

    def add_filter(self, name: str, fn: Callable[..., Any]) -> None:
        """Регистрирует фильтр; существующий фильтр с тем же именем заменяется."""
        self._check_callable("filter", name, fn)
        if name in self.filters:
            logger.debug(f"Filter '{name}' replaced")
        self.filters[name] = fn

    def add_function(self, name: str, fn: Callable[..., Any]) -> None:
        """Регистрирует функцию, доступную в выражениях как name(...)."""
        self._check_callable("function", name, fn)
        self.functions[name] = fn

    @staticmethod
    def _check_callable(kind: str, name: str, fn: Any) -> None:
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError(f"Invalid {kind} name: {name!r}")
        if not callable(fn):
            raise ValueError(f"{kind.capitalize()} '{name}' is not callable")

    # ======= Разбор и рендеринг =======

    def parse(self, source: str, template_name: str = "(string)") -> TemplateTree:
        """Синхронно разбирает текст шаблона в дерево."""
        return TreeBuilder(self.registry).parse(source, template_name)

    async def render_string(
        self,
        source: str,
        context: Optional[Mapping[str, Any]] = None,
        template_name: str = "(string)",
    ) -> str:
        """
        Разбирает и рендерит текст шаблона.

        Raises:
            TemplateSyntaxError: При ошибке разбора
            EvaluationError: При ошибке вычисления
        """
        tree = self.parse(source, template_name)
        return await self._render_tree(tree, self._make_scope(context))

    async def render(self, template_id: str, context: Optional[Mapping[str, Any]] = None) -> str:
        """
        Загружает шаблон через загрузчик и рендерит его.

        Raises:
            LoadError: Если загрузчик не смог предоставить текст
        """
        tree = await self._load_tree(template_id, None)
        return await self._render_tree(tree, self._make_scope(context))

    def render_sync(self, template_id: str, context: Optional[Mapping[str, Any]] = None) -> str:
        """Синхронная обёртка над render() для кода без цикла событий."""
        return asyncio.run(self.render(template_id, context))

    def render_string_sync(
        self,
        source: str,
        context: Optional[Mapping[str, Any]] = None,
        template_name: str = "(string)",
    ) -> str:
        """Синхронная обёртка над render_string()."""
        return asyncio.run(self.render_string(source, context, template_name))

    async def render_include(self, template_id: str, scope: Scope, base: Optional[str] = None) -> str:
        """Рендерит включаемый шаблон в дочерней области текущего контекста."""
        tree = await self._load_tree(template_id, base)
        return await self._render_tree(tree, scope.child())

    # ======= Вычисление выражений =======

    async def evaluate(self, expression: Expression, scope: Scope) -> Any:
        """Вычисляет разобранное выражение с политикой неопределённых имён окружения."""
        return await ExpressionEvaluator(scope, self.undefined).evaluate(expression)

    async def evaluate_text(self, expression: Expression, scope: Scope) -> str:
        return stringify(await self.evaluate(expression, scope))

    # ======= Внутренние методы =======

    def _global_scope(self) -> Scope:
        """Глобальная область: функции и зарезервированное отображение фильтров."""
        bindings: Dict[str, Any] = dict(self.functions)
        bindings[FILTERS_KEY] = dict(self.filters)
        return Scope(bindings)

    def _make_scope(self, context: Optional[Mapping[str, Any]]) -> Scope:
        if context is not None and not isinstance(context, Mapping):
            raise TypeError(f"Context must be a mapping, got {type(context).__name__}")
        return self._global_scope().child(context or {})

    async def _load_tree(self, template_id: str, base: Optional[str]) -> TemplateTree:
        try:
            source = await self.loader(template_id, base)
        except TmplUserError:
            raise
        except Exception as e:
            raise LoadError(f"Failed to load template {template_id}: {e}", template_id) from e

        if not isinstance(source, str):
            raise LoadError(f"Loader returned {type(source).__name__} for {template_id}, expected str", template_id)
        return self.parse(source, template_id)

    async def _render_tree(self, tree: TemplateTree, scope: Scope) -> str:
        renderer = TemplateRenderer(tree, self, parallel=self.config.parallel_children)
        return await renderer.render(scope)


__all__ = ["Environment"]
