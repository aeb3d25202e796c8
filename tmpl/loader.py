"""
Загрузчики исходных текстов шаблонов.

Загрузчик — любой асинхронный вызываемый объект
`(template_id, base) -> str`, где base — идентификатор шаблона,
из которого выполняется включение (None для корневого рендера).
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePosixPath
from typing import Awaitable, Callable, Dict, Mapping, Optional, Union

from .errors import LoadError

logger = logging.getLogger(__name__)

Loader = Callable[[str, Optional[str]], Awaitable[str]]


class FileSystemLoader:
    """
    Читает шаблоны из каталога.

    Идентификаторы — POSIX-пути относительно корня. Идентификатор,
    начинающийся с "./" или "../", разрешается относительно каталога
    включающего шаблона. Выход за пределы корня запрещён.
    """

    def __init__(self, root: Union[str, Path] = ".", encoding: str = "utf-8", suffix: str = ""):
        self.root = Path(root).resolve()
        self.encoding = encoding
        self.suffix = suffix

    async def __call__(self, template_id: str, base: Optional[str] = None) -> str:
        path = self.resolve(template_id, base)
        try:
            text = await asyncio.to_thread(path.read_text, encoding=self.encoding)
        except FileNotFoundError:
            raise LoadError(f"Template not found: {template_id} ({path})", template_id)
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(f"Failed to read template {template_id}: {e}", template_id) from e

        logger.debug(f"Loaded template '{template_id}' from {path}")
        return text

    def resolve(self, template_id: str, base: Optional[str] = None) -> Path:
        """
        Преобразует идентификатор в путь внутри корня.

        Raises:
            LoadError: Если идентификатор пуст или путь выходит за пределы корня
        """
        if not template_id or not template_id.strip():
            raise LoadError("Empty template id", template_id)

        rel = PurePosixPath(template_id.replace("\\", "/"))
        if rel.is_absolute():
            raise LoadError(f"Absolute template paths are not allowed: {template_id}", template_id)

        if base and template_id.startswith(("./", "../")):
            rel = PurePosixPath(base.replace("\\", "/")).parent / rel

        if self.suffix and not rel.suffix:
            rel = rel.with_name(rel.name + self.suffix)

        path = (self.root / Path(*rel.parts)).resolve()
        try:
            path.relative_to(self.root)
        except ValueError:
            raise LoadError(f"Template path escapes loader root: {template_id}", template_id)
        return path


class DictLoader:
    """Загрузчик шаблонов из словаря (для тестов и встраивания)."""

    def __init__(self, templates: Mapping[str, str]):
        self.templates: Dict[str, str] = dict(templates)

    async def __call__(self, template_id: str, base: Optional[str] = None) -> str:
        try:
            return self.templates[template_id]
        except KeyError:
            raise LoadError(f"Template not found: {template_id}", template_id)


__all__ = ["Loader", "FileSystemLoader", "DictLoader"]
