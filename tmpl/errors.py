"""
Base exceptions for user-facing errors.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from TmplUserError.

Programming errors and bugs should NOT inherit from TmplUserError;
they will propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class TmplUserError(Exception):
    """
    Base class for all user-facing errors of the template engine.

    These errors indicate problems that the template author or the host
    application can fix: malformed templates, unknown tags, missing
    variables, unreadable template files, etc.
    """
    pass


class TemplateSyntaxError(TmplUserError):
    """
    Parse-time error: a delimiter is not valid in the current context.

    Carries the template name and an approximate 1-based line number.
    """

    def __init__(self, message: str, template_name: str = "(string)", line: Optional[int] = None):
        self.message = message
        self.template_name = template_name
        self.line = line
        super().__init__(f"[{template_name}:{line if line is not None else '?'}] {message}")


class UnknownTagError(TemplateSyntaxError):
    """Tag name is not registered in the tag registry."""
    pass


class MalformedTagError(TemplateSyntaxError):
    """Tag markup does not match the `<name> <signature>` shape or its arguments are invalid."""
    pass


class MismatchedCloseError(TemplateSyntaxError):
    """End/inside tag does not belong to the family of the current cursor."""
    pass


class UnterminatedConstructError(TemplateSyntaxError):
    """Input ended inside a delimiter pair or with unclosed start tags."""
    pass


class EvaluationError(TmplUserError):
    """Identifier resolution failure, filter/function failure or type mismatch during rendering."""
    pass


class LoadError(TmplUserError):
    """The template loader could not provide template text."""

    def __init__(self, message: str, template_id: str = ""):
        super().__init__(message)
        self.template_id = template_id


__all__ = [
    "TmplUserError",
    "TemplateSyntaxError",
    "UnknownTagError",
    "MalformedTagError",
    "MismatchedCloseError",
    "UnterminatedConstructError",
    "EvaluationError",
    "LoadError",
]
