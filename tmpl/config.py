"""
Конфигурация движка шаблонов.

Настройки задаются в коде через EngineConfig или читаются из YAML-файла
вида:

    search_path: templates
    undefined: lenient
    parallel_children: true
    encoding: utf-8
    suffix: .tmpl
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

from ruamel.yaml import YAML

from .expressions.evaluator import UndefinedPolicy

_yaml = YAML(typ="safe")

_KNOWN_KEYS = {"search_path", "undefined", "parallel_children", "encoding", "suffix"}


@dataclass(frozen=True)
class EngineConfig:
    """
    Настройки окружения шаблонов.

    Attributes:
        search_path: Корневой каталог загрузчика файлов
        undefined: Политика неопределённых имён ("strict" или "lenient")
        parallel_children: Запускать рендеринг детей конкурентно (asyncio.gather)
        encoding: Кодировка файлов шаблонов
        suffix: Суффикс, добавляемый к идентификатору шаблона без расширения
    """
    search_path: str = "."
    undefined: str = UndefinedPolicy.STRICT.value
    parallel_children: bool = False
    encoding: str = "utf-8"
    suffix: str = ""

    def __post_init__(self):
        # Валидируем сразу, чтобы ошибка указывала на конфиг, а не на рендер
        UndefinedPolicy.parse(self.undefined)
        if self.suffix and not self.suffix.startswith("."):
            raise ValueError(f"Template suffix must start with '.': {self.suffix!r}")

    @property
    def undefined_policy(self) -> UndefinedPolicy:
        return UndefinedPolicy.parse(self.undefined)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Создание экземпляра из словаря (из YAML)."""
        unknown = set(data) - _KNOWN_KEYS
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        parallel = data.get("parallel_children", False)
        if not isinstance(parallel, bool):
            raise ValueError(f"parallel_children must be a boolean, got {parallel!r}")

        return cls(
            search_path=str(data.get("search_path", ".")),
            undefined=str(data.get("undefined", UndefinedPolicy.STRICT.value)).lower(),
            parallel_children=parallel,
            encoding=str(data.get("encoding", "utf-8")),
            suffix=str(data.get("suffix", "") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь для YAML."""
        result: Dict[str, Any] = {
            "search_path": self.search_path,
            "undefined": self.undefined,
            "parallel_children": self.parallel_children,
            "encoding": self.encoding,
        }
        if self.suffix:
            result["suffix"] = self.suffix
        return result


def read_yaml_map(path: Path) -> dict:
    """Читает YAML (или JSON) файл и возвращает словарь."""
    raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"YAML must be a mapping: {path}")
    return raw


def load_config(path: Union[str, Path]) -> EngineConfig:
    """
    Загружает конфигурацию движка из YAML-файла.

    Относительный search_path разрешается от каталога файла конфигурации.

    Raises:
        FileNotFoundError: Если файл не существует
        ValueError: При некорректных значениях
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    data = read_yaml_map(path)
    config = EngineConfig.from_dict(data)

    search_path = Path(config.search_path)
    if not search_path.is_absolute():
        data = dict(data, search_path=str((path.parent / search_path).resolve()))
        config = EngineConfig.from_dict(data)

    return config


__all__ = ["EngineConfig", "load_config", "read_yaml_map"]
