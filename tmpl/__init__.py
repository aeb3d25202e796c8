"""
tmpl — асинхронный движок шаблонов с расширяемыми тегами.

    from tmpl import Environment

    env = Environment()
    text = env.render_string_sync("Hello, {{ name | upper }}!", {"name": "world"})
"""

from __future__ import annotations

from .config import EngineConfig, load_config
from .engine import Environment
from .errors import (
    EvaluationError,
    LoadError,
    MalformedTagError,
    MismatchedCloseError,
    TemplateSyntaxError,
    TmplUserError,
    UnknownTagError,
    UnterminatedConstructError,
)
from .expressions import ExpressionSyntaxError, UndefinedPolicy
from .loader import DictLoader, FileSystemLoader
from .template import Deferred, Resolved, Scope, TagPlugin, TagRole
from .version import tool_version

__version__ = tool_version()

__all__ = [
    "Environment",
    "EngineConfig",
    "load_config",
    "FileSystemLoader",
    "DictLoader",
    "TagPlugin",
    "TagRole",
    "Scope",
    "Resolved",
    "Deferred",
    "UndefinedPolicy",
    "TmplUserError",
    "TemplateSyntaxError",
    "UnknownTagError",
    "MalformedTagError",
    "MismatchedCloseError",
    "UnterminatedConstructError",
    "ExpressionSyntaxError",
    "EvaluationError",
    "LoadError",
]
