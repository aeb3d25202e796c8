"""
Общие соглашения о селекторах для семейств ветвления.

START-узел семейства вычисляет, выбрана ли уже ветвь, и передаёт это
детям через селектор. Внутренние (INSIDE) узлы возвращают Deferred
и по селектору решают, выводить ли своё тело или передать выбор
дальше по цепочке.
"""

from __future__ import annotations

from typing import Any

from ..nodes import TagNode, TagRole, TemplateNode


class BranchSelector:
    """Маркер состояния выбора ветви. Сравнивается только по идентичности."""

    __slots__ = ("label",)

    def __init__(self, label: str):
        self.label = label

    def __repr__(self) -> str:
        return f"<{self.label}>"


# Ветвь уже выбрана: оставшиеся внутренние узлы выводят пустую строку
TAKEN = BranchSelector("taken")

# Ветвь ещё не выбрана: следующий внутренний узел проверяет своё условие
PENDING = BranchSelector("pending")


def is_inside(node: TemplateNode) -> bool:
    """Предикат для рендеринга только внутренних тегов семейства."""
    return isinstance(node, TagNode) and node.role is TagRole.INSIDE


def is_taken(selector: Any) -> bool:
    return selector is TAKEN


def require_empty(tag_name: str, signature: str) -> None:
    """Проверяет, что тег записан без аргументов."""
    if signature.strip():
        raise ValueError(f"'{tag_name}' takes no arguments, got '{signature}'")


def require_signature(tag_name: str, signature: str) -> str:
    """Проверяет, что у тега есть аргументы."""
    if not signature.strip():
        raise ValueError(f"'{tag_name}' requires an expression")
    return signature


__all__ = ["BranchSelector", "TAKEN", "PENDING", "is_inside", "is_taken", "require_empty", "require_signature"]
