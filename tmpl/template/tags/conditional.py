"""
Условная конструкция {% if %} / {% elif %} / {% else %} / {% endif %}.

Цепочка elif/else вкладывается друг в друга: каждый следующий
внутренний тег становится ребёнком предыдущего. Условие проверяется
только если ни одна из предыдущих ветвей не выбрана.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .branching import PENDING, TAKEN, is_inside, is_taken, require_empty, require_signature
from ..base import TagPlugin
from ..context import Scope
from ..nodes import TagNode, TagRole
from ..types import ChildrenRenderer, Deferred, RenderResult
from ...expressions import parse_expression

if TYPE_CHECKING:
    from ...engine import Environment


class IfTag(TagPlugin):
    """
    Плагин условных блоков.

    Пример:
        {% if user.admin %}admin{% elif user %}user{% else %}guest{% endif %}
    """

    tag_names = ("if",)
    inside_tag_names = ("elif", "else")
    final_tag_names = ("else",)

    @property
    def name(self) -> str:
        return "if"

    def parse_args(self, tag_name: str, role: TagRole, signature: str):
        if tag_name == "else":
            require_empty(tag_name, signature)
            return None
        return parse_expression(require_signature(tag_name, signature))

    async def render(
        self,
        node: TagNode,
        scope: Scope,
        env: "Environment",
        children: ChildrenRenderer,
    ) -> RenderResult:
        if node.role is TagRole.START:
            return await self._branch(node, scope, env, children)

        async def pick(selector) -> str:
            if is_taken(selector):
                return ""
            if node.name == "else":
                return await children(scope, TAKEN)
            return await self._branch(node, scope, env, children)

        return Deferred(pick)

    @staticmethod
    async def _branch(node: TagNode, scope: Scope, env: "Environment", children: ChildrenRenderer) -> str:
        """Проверяет условие: тело с TAKEN или только внутренние теги с PENDING."""
        if await env.evaluate(node.args, scope):
            return await children(scope, TAKEN)
        return await children(scope, PENDING, include=is_inside)


__all__ = ["IfTag"]
