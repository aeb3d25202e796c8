from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from tmpl import EngineConfig, Environment
from tmpl.loader import DictLoader


def write(p: Path, text: str) -> Path:
    """Записывает текст в файл, создавая родительские директории при необходимости."""
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


@pytest.fixture
def env() -> Environment:
    """Окружение со строгой политикой и шаблонами в памяти."""
    return Environment(loader=DictLoader({}))


@pytest.fixture
def lenient_env() -> Environment:
    return Environment(loader=DictLoader({}), config=EngineConfig(undefined="lenient"))


@pytest.fixture
def render(env):
    """Синхронный помощник: render(source, **context) -> str."""

    def _render(source: str, context: Optional[Dict[str, Any]] = None, **kwargs: Any) -> str:
        return asyncio.run(env.render_string(source, {**(context or {}), **kwargs}))

    return _render


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Каталог шаблонов с парой включаемых файлов."""
    root = tmp_path / "templates"
    write(root / "page.html", "<h1>{{ title }}</h1>{% include 'parts/footer.html' %}")
    write(root / "parts" / "footer.html", "<footer>{{ owner | default: 'nobody' }}</footer>")
    write(root / "parts" / "nav.html", "nav:{% include './item.html' %}")
    write(root / "parts" / "item.html", "[{{ name }}]")
    return root
