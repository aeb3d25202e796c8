"""
Цикл {% for x in items %} / {% empty %} / {% endfor %}.

Каждая итерация рендерится в собственной дочерней области видимости,
где кроме переменных цикла доступен объект loop. Если коллекция пуста,
выводится тело {% empty %}.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from .branching import PENDING, TAKEN, is_inside, is_taken, require_empty
from ..base import TagPlugin
from ..context import Scope
from ..nodes import TagNode, TagRole
from ..types import ChildrenRenderer, Deferred, RenderResult
from ...errors import EvaluationError
from ...expressions import Expression, parse_expression

if TYPE_CHECKING:
    from ...engine import Environment

# for item in expr / for key, value in expr
FOR_SIGNATURE = re.compile(
    r"^\s*([A-Za-z_][A-Za-z0-9_]*)(?:\s*,\s*([A-Za-z_][A-Za-z0-9_]*))?\s+in\s+(.+?)\s*$",
    re.DOTALL,
)


@dataclass(frozen=True)
class LoopArgs:
    """Разобранная сигнатура цикла."""
    targets: Tuple[str, ...]
    iterable: Expression


@dataclass(frozen=True)
class LoopInfo:
    """Объект loop, доступный в теле цикла."""
    index0: int
    length: int

    @property
    def index(self) -> int:
        return self.index0 + 1

    @property
    def first(self) -> bool:
        return self.index0 == 0

    @property
    def last(self) -> bool:
        return self.index0 == self.length - 1


class ForTag(TagPlugin):
    """
    Плагин циклов.

    Пример:
        {% for name in names %}{{ loop.index }}. {{ name }}{% empty %}none{% endfor %}
    """

    tag_names = ("for",)
    inside_tag_names = ("empty",)
    final_tag_names = ("empty",)

    @property
    def name(self) -> str:
        return "for"

    def parse_args(self, tag_name: str, role: TagRole, signature: str) -> Optional[LoopArgs]:
        if role is TagRole.INSIDE:
            require_empty(tag_name, signature)
            return None

        match = FOR_SIGNATURE.match(signature)
        if not match:
            raise ValueError(f"Expected 'for <name>[, <name>] in <expression>', got '{signature}'")

        first, second, source = match.groups()
        targets = (first, second) if second else (first,)
        return LoopArgs(targets=targets, iterable=parse_expression(source))

    async def render(
        self,
        node: TagNode,
        scope: Scope,
        env: "Environment",
        children: ChildrenRenderer,
    ) -> RenderResult:
        if node.role is TagRole.INSIDE:
            async def pick(selector: Any) -> str:
                if is_taken(selector):
                    return ""
                return await children(scope, TAKEN)

            return Deferred(pick)

        args: LoopArgs = node.args
        items = self._collect(await env.evaluate(args.iterable, scope), args.targets)
        if not items:
            return await children(scope, PENDING, include=is_inside)

        parts: List[str] = []
        for index0, item in enumerate(items):
            bindings = self._bind(args.targets, item)
            bindings["loop"] = LoopInfo(index0=index0, length=len(items))
            parts.append(await children(scope.child(bindings), TAKEN))
        return "".join(parts)

    @staticmethod
    def _collect(value: Any, targets: Tuple[str, ...]) -> List[Any]:
        """Материализует итерируемое значение в список элементов."""
        if value is None:
            return []
        if isinstance(value, Mapping):
            return list(value.items()) if len(targets) == 2 else list(value.keys())
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise EvaluationError(f"Cannot iterate over {type(value).__name__}")
        return list(value)

    @staticmethod
    def _bind(targets: Tuple[str, ...], item: Any) -> Dict[str, Any]:
        if len(targets) == 1:
            return {targets[0]: item}
        try:
            first, second = item
        except (TypeError, ValueError) as e:
            raise EvaluationError(f"Cannot unpack {item!r} into {', '.join(targets)}") from e
        return {targets[0]: first, targets[1]: second}


__all__ = ["ForTag", "LoopArgs", "LoopInfo", "FOR_SIGNATURE"]
