"""
Узлы дерева шаблона.

Дерево хранится как арена узлов, адресуемых стабильными целочисленными
дескрипторами. Каждый узел хранит дескриптор родителя (только для
навигации) и упорядоченный список дескрипторов детей; порядок детей
совпадает с порядком рендеринга.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator, List, Optional

if TYPE_CHECKING:
    from .base import TagPlugin
    from ..expressions.model import Expression

ROOT_HANDLE = 0


class TagRole(enum.Enum):
    """Позиция вхождения тега внутри семейства."""
    START = "start"
    INSIDE = "inside"
    END = "end"


@dataclass(eq=False)
class TemplateNode:
    """Базовый класс для всех узлов дерева шаблона."""
    handle: int = field(default=-1, init=False)
    parent: Optional[int] = field(default=None, init=False, repr=False)
    children: List[int] = field(default_factory=list, init=False, repr=False)


@dataclass(eq=False)
class RootNode(TemplateNode):
    """Единственный корень дерева. Роли не имеет."""
    pass


@dataclass(eq=False)
class TextNode(TemplateNode):
    """
    Обычный текстовый контент в шаблоне.

    Выводится в результат как есть.
    """
    text: str


@dataclass(eq=False)
class ExpressionNode(TemplateNode):
    """
    Выражение вывода {{ ... }}.

    Исходный текст разбирается в AST выражения лениво, при первом вычислении.
    """
    source: str
    line: int = 1
    expression: Optional["Expression"] = field(default=None, init=False, repr=False)


@dataclass(eq=False)
class TagNode(TemplateNode):
    """
    Вхождение тега {% name signature %}.

    Аргументы разбираются плагином ровно один раз при создании узла.
    """
    name: str
    role: TagRole
    signature: str
    family: str                  # Идентичность семейства тегов (имя плагина)
    plugin: "TagPlugin" = field(repr=False)
    args: Any = None
    line: int = 1
    template_name: str = "(string)"

    @property
    def singular(self) -> bool:
        """Одиночный тег: без парного закрывающего тега и без собственных детей."""
        return self.role is TagRole.START and self.plugin.singular

    def __str__(self) -> str:
        markup = f"{self.name} {self.signature}".strip()
        return f"{{% {markup} %}}"


class TemplateTree:
    """
    Арена узлов шаблона.

    Дерево единолично владеет всеми узлами; курсор вставки при разборе —
    это просто значение дескриптора.
    """

    def __init__(self, template_name: str = "(string)"):
        self.template_name = template_name
        root = RootNode()
        root.handle = ROOT_HANDLE
        self.nodes: List[TemplateNode] = [root]

    @property
    def root(self) -> RootNode:
        return self.nodes[ROOT_HANDLE]  # type: ignore[return-value]

    def node(self, handle: int) -> TemplateNode:
        return self.nodes[handle]

    def append(self, parent: int, node: TemplateNode) -> int:
        """
        Добавляет узел последним ребёнком указанного родителя.

        Returns:
            Дескриптор нового узла
        """
        if node.handle != -1:
            raise ValueError(f"Node {node!r} already belongs to a tree")
        node.handle = len(self.nodes)
        node.parent = parent
        self.nodes.append(node)
        self.nodes[parent].children.append(node.handle)
        return node.handle

    def parent(self, handle: int) -> Optional[int]:
        return self.nodes[handle].parent

    def children(self, handle: int) -> List[TemplateNode]:
        return [self.nodes[h] for h in self.nodes[handle].children]

    def walk(self, handle: int = ROOT_HANDLE) -> Iterator[TemplateNode]:
        """Обходит поддерево в порядке документа (pre-order)."""
        node = self.nodes[handle]
        yield node
        for child in node.children:
            yield from self.walk(child)

    def __len__(self) -> int:
        return len(self.nodes)


__all__ = [
    "ROOT_HANDLE",
    "TagRole",
    "TemplateNode",
    "RootNode",
    "TextNode",
    "ExpressionNode",
    "TagNode",
    "TemplateTree",
]
