"""
Ядро шаблонизатора: токенизация, автомат контекстов, построение дерева,
реестр тегов и движок рендеринга с протоколом отложенного выбора ветви.
"""

from __future__ import annotations

from .base import TagPlugin
from .context import FILTERS_KEY, Scope
from .nodes import ROOT_HANDLE, ExpressionNode, RootNode, TagNode, TagRole, TemplateNode, TemplateTree, TextNode
from .parser import TreeBuilder
from .processor import TemplateRenderer
from .registry import TagRegistry, TagRoute
from .types import ChildrenRenderer, Deferred, RenderResult, Resolved

__all__ = [
    "TagPlugin",
    "TagRegistry",
    "TagRoute",
    "TagRole",
    "TreeBuilder",
    "TemplateRenderer",
    "TemplateTree",
    "TemplateNode",
    "RootNode",
    "TextNode",
    "ExpressionNode",
    "TagNode",
    "ROOT_HANDLE",
    "Scope",
    "FILTERS_KEY",
    "Resolved",
    "Deferred",
    "RenderResult",
    "ChildrenRenderer",
]
