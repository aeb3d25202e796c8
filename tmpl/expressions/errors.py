from __future__ import annotations

from ..errors import EvaluationError, TmplUserError


class ExpressionSyntaxError(TmplUserError):
    """Ошибка парсинга выражения."""

    def __init__(self, message: str, position: int):
        self.message = message
        self.position = position
        super().__init__(f"Parse error at position {position}: {message}")


__all__ = ["ExpressionSyntaxError", "EvaluationError"]
