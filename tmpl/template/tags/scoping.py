"""
Блок {% with name = expr %} / {% endwith %}.

Вычисляет значение и рендерит тело в дочерней области видимости
с новой привязкой. Родительская область не изменяется.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..base import TagPlugin
from ..context import Scope
from ..nodes import TagNode, TagRole
from ..types import ChildrenRenderer, RenderResult
from ...expressions import Expression, parse_expression

if TYPE_CHECKING:
    from ...engine import Environment

WITH_SIGNATURE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=(?!=)\s*(.+?)\s*$", re.DOTALL)


@dataclass(frozen=True)
class WithArgs:
    target: str
    value: Expression


class WithTag(TagPlugin):
    """Плагин локальных привязок."""

    tag_names = ("with",)

    @property
    def name(self) -> str:
        return "with"

    def parse_args(self, tag_name: str, role: TagRole, signature: str) -> WithArgs:
        match = WITH_SIGNATURE.match(signature)
        if not match:
            raise ValueError(f"Expected 'with <name> = <expression>', got '{signature}'")
        target, source = match.groups()
        return WithArgs(target=target, value=parse_expression(source))

    async def render(
        self,
        node: TagNode,
        scope: Scope,
        env: "Environment",
        children: ChildrenRenderer,
    ) -> RenderResult:
        args: WithArgs = node.args
        value = await env.evaluate(args.value, scope)
        return await children(scope.child({args.target: value}))


__all__ = ["WithTag", "WithArgs"]
