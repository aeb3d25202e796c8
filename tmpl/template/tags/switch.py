"""
Множественное ветвление {% switch %} / {% case %} / {% default %} / {% endswitch %}.

START-узел вычисляет значение и передаёт его селектором цепочке case.
Совпавший case выводит тело, остальные передают селектор дальше.
Текст между switch и первым case не выводится.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .branching import TAKEN, is_inside, is_taken, require_empty, require_signature
from ..base import TagPlugin
from ..context import Scope
from ..nodes import TagNode, TagRole
from ..types import ChildrenRenderer, Deferred, RenderResult
from ...expressions import parse_expression

if TYPE_CHECKING:
    from ...engine import Environment


class SwitchTag(TagPlugin):
    """
    Плагин множественного ветвления.

    Пример:
        {% switch kind %}{% case "a", "b" %}AB{% case "c" %}C{% default %}?{% endswitch %}
    """

    tag_names = ("switch",)
    inside_tag_names = ("case", "default")
    final_tag_names = ("default",)

    @property
    def name(self) -> str:
        return "switch"

    def parse_args(self, tag_name: str, role: TagRole, signature: str):
        if tag_name == "default":
            require_empty(tag_name, signature)
            return None
        if tag_name == "case":
            # Несколько значений через запятую разбираем как литерал списка
            return parse_expression(f"[{require_signature(tag_name, signature)}]")
        return parse_expression(require_signature(tag_name, signature))

    async def render(
        self,
        node: TagNode,
        scope: Scope,
        env: "Environment",
        children: ChildrenRenderer,
    ) -> RenderResult:
        if node.role is TagRole.START:
            value = await env.evaluate(node.args, scope)
            return await children(scope, _Subject(value), include=is_inside)

        async def pick(selector: Any) -> str:
            if is_taken(selector):
                return ""
            if node.name == "default":
                return await children(scope, TAKEN)
            if not isinstance(selector, _Subject):
                raise TypeError(f"{node} must be placed inside a switch")

            candidates = await env.evaluate(node.args, scope)
            if selector.value in candidates:
                return await children(scope, TAKEN)
            return await children(scope, selector, include=is_inside)

        return Deferred(pick)


class _Subject:
    """Значение switch, ещё не сопоставленное ни с одним case."""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value


__all__ = ["SwitchTag"]
