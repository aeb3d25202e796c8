"""
Построитель дерева шаблона.

Однопроходный разбор: токены лексера прогоняются через автомат
контекстов, а построитель по маршрутам реестра тегов создаёт узлы и
перемещает курсор вставки при открытии/закрытии составных тегов.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .automaton import ScopeAutomaton, ScopeContext
from .lexer import TemplateLexer
from .nodes import ROOT_HANDLE, ExpressionNode, TagNode, TagRole, TemplateTree, TextNode
from .registry import TagRegistry, TagRoute
from .tokens import Token, TokenType
from ..errors import (
    MalformedTagError,
    MismatchedCloseError,
    TemplateSyntaxError,
    UnterminatedConstructError,
)

logger = logging.getLogger(__name__)

# Первое слово — имя тега, остаток (без крайних пробелов) — сигнатура
TAG_MARKUP = re.compile(r"^\s*(\S+)\s*(.*?)\s*$", re.DOTALL)


class TreeBuilder:
    """
    Строит дерево владения узлами из текста шаблона.

    Построитель не знает семантики тегов: для проверки вложенности
    и перемещения курсора ему достаточно роли и семейства тега.
    """

    def __init__(self, registry: TagRegistry):
        self.registry = registry

    def parse(self, text: str, template_name: str = "(string)") -> TemplateTree:
        """
        Разбирает текст шаблона в дерево.

        Raises:
            TemplateSyntaxError: И его подклассы при любой ошибке разбора
        """
        tree = TemplateTree(template_name)
        automaton = ScopeAutomaton(template_name)
        cursor = ROOT_HANDLE
        payload: Optional[Token] = None

        for token in TemplateLexer(text, template_name):
            owner = automaton.feed(token)

            if token.type is TokenType.TEXT:
                if owner is ScopeContext.CONTENT:
                    tree.append(cursor, TextNode(token.value))
                elif owner in (ScopeContext.EXPRESSION, ScopeContext.TAG):
                    payload = token
                continue

            if owner is ScopeContext.EXPRESSION:
                self._add_expression(tree, cursor, payload, token)
                payload = None
            elif owner is ScopeContext.TAG:
                cursor = self._add_tag(tree, cursor, payload, token)
                payload = None

        automaton.finish()

        if cursor != ROOT_HANDLE:
            unclosed = tree.node(cursor)
            line = unclosed.line if isinstance(unclosed, TagNode) else automaton.line
            raise UnterminatedConstructError(f"{unclosed} left unclosed", template_name, line)

        logger.debug(f"Parsed template '{template_name}' -> {len(tree)} nodes")
        return tree

    # ======= Внутренние методы =======

    def _add_expression(self, tree: TemplateTree, cursor: int, payload: Optional[Token], closing: Token) -> None:
        """Добавляет узел выражения под курсор."""
        if payload is None or not payload.value.strip():
            raise TemplateSyntaxError("Empty expression", tree.template_name, closing.line)
        tree.append(cursor, ExpressionNode(payload.value.strip(), line=payload.line))

    def _add_tag(self, tree: TemplateTree, cursor: int, payload: Optional[Token], closing: Token) -> int:
        """
        Создаёт узел тега и применяет его к дереву.

        Returns:
            Новое положение курсора
        """
        line = payload.line if payload is not None else closing.line
        match = TAG_MARKUP.match(payload.value) if payload is not None else None
        if match is None:
            raise MalformedTagError("Missing tag name", tree.template_name, line)

        tag_name, signature = match.groups()
        route = self.registry.route(tag_name, tree.template_name, line)
        node = self._create_node(route, tag_name, signature, line, tree.template_name)

        if route.role is TagRole.START:
            handle = tree.append(cursor, node)
            return cursor if node.singular else handle

        if route.role is TagRole.END:
            start = self._family_start(tree, cursor, route.family)
            if start is None:
                raise MismatchedCloseError(
                    f"Can't close {self._describe(tree, cursor)} with {node}",
                    tree.template_name, line
                )
            parent = tree.parent(start)
            return ROOT_HANDLE if parent is None else parent

        # INSIDE: курсор должен принадлежать тому же семейству
        current = tree.node(cursor)
        if not isinstance(current, TagNode) or current.family != route.family:
            raise MismatchedCloseError(
                f"Can't include {node} in {self._describe(tree, cursor)}",
                tree.template_name, line
            )
        if current.role is TagRole.INSIDE and current.name in current.plugin.final_tag_names:
            raise MismatchedCloseError(
                f"{node} can't follow {current}, expected {current.plugin.end_tag_names()[0]}",
                tree.template_name, line
            )
        return tree.append(cursor, node)

    def _create_node(self, route: TagRoute, tag_name: str, signature: str, line: int, template_name: str) -> TagNode:
        """Создаёт узел и однократно разбирает его аргументы."""
        args = None
        if route.role is not TagRole.END:
            try:
                args = route.plugin.parse_args(tag_name, route.role, signature)
            except Exception as e:
                raise MalformedTagError(
                    f"Invalid arguments for tag '{tag_name}': {e}", template_name, line
                ) from e

        return TagNode(
            name=tag_name,
            role=route.role,
            signature=signature,
            family=route.family,
            plugin=route.plugin,
            args=args,
            line=line,
            template_name=template_name,
        )

    @staticmethod
    def _family_start(tree: TemplateTree, cursor: int, family: str) -> Optional[int]:
        """
        Находит START-узел семейства, которому принадлежит курсор.

        Курсор может стоять на START-узле или на цепочке INSIDE-узлов
        того же семейства (например, if → elif → else).
        """
        node = tree.node(cursor)
        while isinstance(node, TagNode) and node.family == family:
            if node.role is TagRole.START:
                return node.handle
            parent = tree.parent(node.handle)
            if parent is None:
                return None
            node = tree.node(parent)
        return None

    @staticmethod
    def _describe(tree: TemplateTree, cursor: int) -> str:
        node = tree.node(cursor)
        return str(node) if isinstance(node, TagNode) else "template root"


__all__ = ["TAG_MARKUP", "TreeBuilder"]
