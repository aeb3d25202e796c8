"""
Одиночный тег {% include expr %}.

Загружает другой шаблон через загрузчик окружения и рендерит его
в дочерней области видимости текущего контекста.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .branching import require_signature
from ..base import TagPlugin
from ..context import Scope
from ..nodes import TagNode, TagRole
from ..types import ChildrenRenderer, RenderResult
from ...expressions import Expression, parse_expression, stringify

if TYPE_CHECKING:
    from ...engine import Environment


class IncludeTag(TagPlugin):
    """Плагин включения шаблонов."""

    tag_names = ("include",)
    singular = True

    @property
    def name(self) -> str:
        return "include"

    def parse_args(self, tag_name: str, role: TagRole, signature: str) -> Expression:
        return parse_expression(require_signature(tag_name, signature))

    async def render(
        self,
        node: TagNode,
        scope: Scope,
        env: "Environment",
        children: ChildrenRenderer,
    ) -> RenderResult:
        template_id = stringify(await env.evaluate(node.args, scope))
        return await env.render_include(template_id, scope, base=node.template_name)


__all__ = ["IncludeTag"]
