"""
Тесты загрузчиков шаблонов.
"""

import asyncio

import pytest

from tmpl.errors import LoadError
from tmpl.loader import DictLoader, FileSystemLoader


class TestFileSystemLoader:

    def test_reads_template(self, templates_dir):
        loader = FileSystemLoader(templates_dir)

        assert asyncio.run(loader("page.html")).startswith("<h1>")

    def test_nested_id(self, templates_dir):
        loader = FileSystemLoader(templates_dir)

        assert asyncio.run(loader("parts/item.html")) == "[{{ name }}]"

    def test_relative_to_base(self, templates_dir):
        loader = FileSystemLoader(templates_dir)

        assert loader.resolve("./item.html", "parts/nav.html") == (templates_dir / "parts" / "item.html").resolve()
        assert loader.resolve("../page.html", "parts/nav.html") == (templates_dir / "page.html").resolve()

    def test_plain_id_ignores_base(self, templates_dir):
        loader = FileSystemLoader(templates_dir)

        assert loader.resolve("page.html", "parts/nav.html") == (templates_dir / "page.html").resolve()

    def test_suffix_appended(self, templates_dir):
        loader = FileSystemLoader(templates_dir, suffix=".html")

        assert loader.resolve("page") == (templates_dir / "page.html").resolve()
        assert loader.resolve("page.html") == (templates_dir / "page.html").resolve()

    def test_missing_template(self, templates_dir):
        loader = FileSystemLoader(templates_dir)

        with pytest.raises(LoadError, match="Template not found: absent.html") as exc_info:
            asyncio.run(loader("absent.html"))
        assert exc_info.value.template_id == "absent.html"

    @pytest.mark.parametrize("template_id", ["../secret.txt", "parts/../../secret.txt"])
    def test_escape_from_root_rejected(self, templates_dir, template_id):
        loader = FileSystemLoader(templates_dir)

        with pytest.raises(LoadError, match="escapes loader root"):
            loader.resolve(template_id)

    def test_absolute_path_rejected(self, templates_dir):
        with pytest.raises(LoadError, match="Absolute template paths"):
            FileSystemLoader(templates_dir).resolve("/etc/passwd")

    def test_empty_id_rejected(self, templates_dir):
        with pytest.raises(LoadError, match="Empty template id"):
            FileSystemLoader(templates_dir).resolve("  ")

    def test_decode_error(self, tmp_path):
        (tmp_path / "bin.txt").write_bytes(b"\xff\xfe\x00bad")
        loader = FileSystemLoader(tmp_path, encoding="utf-8")

        with pytest.raises(LoadError, match="Failed to read template bin.txt"):
            asyncio.run(loader("bin.txt"))


class TestDictLoader:

    def test_lookup(self):
        loader = DictLoader({"a": "A"})

        assert asyncio.run(loader("a")) == "A"
        with pytest.raises(LoadError, match="Template not found: b"):
            asyncio.run(loader("b", "a"))
