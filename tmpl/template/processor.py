"""
Движок рендеринга дерева шаблона.

Рекурсивно применяет узлы дерева к области видимости и селектору,
реализуя протокол отложенного выбора ветви: плагин тега возвращает
либо готовый текст, либо функцию от селектора, которую движок вызывает
с селектором, переданным узлу его родителем.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Awaitable, List, Optional

from .context import Scope
from .nodes import ROOT_HANDLE, ExpressionNode, RootNode, TagNode, TemplateNode, TemplateTree, TextNode
from .types import ChildFilter, ChildrenRenderer, Deferred, Resolved
from ..errors import EvaluationError, TmplUserError
from ..expressions import ExpressionSyntaxError, parse_expression

if TYPE_CHECKING:
    from ..engine import Environment

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """
    Рендерер одного дерева в рамках одного вызова render.

    Движок не знает семантики ни одной управляющей конструкции:
    вся логика ветвления живёт в плагинах тегов.
    """

    def __init__(self, tree: TemplateTree, env: "Environment", parallel: bool = False):
        """
        Args:
            tree: Дерево шаблона
            env: Окружение (вычисление выражений, загрузчик, реестр)
            parallel: Запускать детей конкурентно и склеивать в порядке документа
        """
        self.tree = tree
        self.env = env
        self.parallel = parallel

    async def render(self, scope: Scope) -> str:
        """Рендерит дерево целиком. Корень получает отсутствующий селектор."""
        return await self.apply(ROOT_HANDLE, scope, None)

    async def apply(self, handle: int, scope: Scope, selector: Any = None) -> str:
        """
        Применяет узел к области видимости и селектору родителя.

        Raises:
            TmplUserError: Любая ошибка рендеринга прерывает весь рендер
        """
        node = self.tree.node(handle)

        if isinstance(node, TextNode):
            return node.text
        if isinstance(node, ExpressionNode):
            return await self._render_expression(node, scope)
        if isinstance(node, RootNode):
            return await self._children_renderer(node)(scope, selector)
        if isinstance(node, TagNode):
            return await self._render_tag(node, scope, selector)

        raise TypeError(f"Unsupported template node: {type(node).__name__}")

    # ======= Внутренние методы =======

    def _children_renderer(self, node: TemplateNode) -> ChildrenRenderer:
        """Создаёт замыкание, рендерящее детей узла в порядке документа."""

        async def render_children(
            scope: Scope,
            selector: Any = None,
            include: Optional[ChildFilter] = None,
        ) -> str:
            children = self.tree.children(node.handle)
            if include is not None:
                children = [child for child in children if include(child)]

            if self.parallel:
                parts = await self._gather([self.apply(child.handle, scope, selector) for child in children])
            else:
                parts = [await self.apply(child.handle, scope, selector) for child in children]

            return "".join(parts)

        return render_children

    @staticmethod
    async def _gather(coros: List[Awaitable[str]]) -> List[str]:
        """
        Запускает детей конкурентно и возвращает результаты в порядке документа.

        Первая ошибка отменяет ещё работающих соседей; исключение
        пробрасывается после их завершения.
        """
        tasks = [asyncio.ensure_future(coro) for coro in coros]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _render_expression(self, node: ExpressionNode, scope: Scope) -> str:
        """Вычисляет узел вывода; AST разбирается при первом обращении."""
        try:
            if node.expression is None:
                node.expression = parse_expression(node.source)
            return await self.env.evaluate_text(node.expression, scope)
        except ExpressionSyntaxError as e:
            raise EvaluationError(f"[{self.tree.template_name}:{node.line}] {{{{ {node.source} }}}}: {e}") from e
        except EvaluationError as e:
            raise EvaluationError(f"[{self.tree.template_name}:{node.line}] {e}") from e
        except TmplUserError:
            raise
        except Exception as e:
            raise EvaluationError(
                f"[{self.tree.template_name}:{node.line}] Error rendering {{{{ {node.source} }}}}: {e}"
            ) from e

    async def _render_tag(self, node: TagNode, scope: Scope, selector: Any) -> str:
        """Вызывает render плагина и разрешает отложенный результат."""
        children = self._children_renderer(node)
        try:
            result = await node.plugin.render(node, scope, self.env, children)
            if isinstance(result, Deferred):
                return await result.resolve(selector)
            if isinstance(result, Resolved):
                return result.text
            if isinstance(result, str):
                return result
            raise TypeError(
                f"Tag plugin '{node.family}' returned {type(result).__name__}, "
                f"expected str, Resolved or Deferred"
            )
        except TmplUserError:
            raise
        except Exception as e:
            logger.debug(f"Tag {node} failed in '{self.tree.template_name}'", exc_info=True)
            raise EvaluationError(
                f"[{self.tree.template_name}:{node.line}] Error rendering {node}: {e}"
            ) from e


__all__ = ["TemplateRenderer"]
