"""
Блок {% apply filters %} / {% endapply %} (синоним {% filter %}).

Отрендеренное тело пропускается через цепочку фильтров. Сигнатура не
имеет собственной грамматики: из неё синтезируется выражение
`__sentinel__ | <сигнатура>`, где __sentinel__ связан с телом блока.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .branching import require_signature
from ..base import TagPlugin
from ..context import Scope
from ..nodes import TagNode, TagRole
from ..types import ChildrenRenderer, RenderResult
from ...expressions import Expression, ExprType, parse_expression, stringify

if TYPE_CHECKING:
    from ...engine import Environment

SENTINEL = "__sentinel__"


class ApplyTag(TagPlugin):
    """
    Плагин применения фильтров к блоку.

    Пример:
        {% apply trim | upper %}  hello  {% endapply %}  →  HELLO
    """

    tag_names = ("apply", "filter")

    @property
    def name(self) -> str:
        return "apply"

    def parse_args(self, tag_name: str, role: TagRole, signature: str) -> Expression:
        expression = parse_expression(f"{SENTINEL} | {require_signature(tag_name, signature)}")
        if expression.get_type() != ExprType.FILTER:
            raise ValueError(f"'{tag_name}' expects a filter chain, got '{signature}'")
        return expression

    async def render(
        self,
        node: TagNode,
        scope: Scope,
        env: "Environment",
        children: ChildrenRenderer,
    ) -> RenderResult:
        body = await children(scope)
        value = await env.evaluate(node.args, scope.child({SENTINEL: body}))
        return stringify(value)


__all__ = ["ApplyTag", "SENTINEL"]
