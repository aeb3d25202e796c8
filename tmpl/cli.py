from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .config import EngineConfig, load_config, read_yaml_map
from .engine import Environment
from .errors import TmplUserError
from .version import tool_version


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tmpl",
        description="Async template engine with extensible tags",
        add_help=True,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument("-v", "--verbose", action="store_true", help="подробный лог в stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "--config",
            metavar="FILE",
            help="YAML-файл настроек движка (search_path, undefined, parallel_children, ...)",
        )
        sp.add_argument(
            "--search-path",
            metavar="DIR",
            help="корень загрузчика шаблонов (перекрывает search_path из конфига)",
        )

    sp_render = sub.add_parser("render", help="Отрендерить шаблон в stdout")
    sp_render.add_argument(
        "template",
        help="идентификатор шаблона относительно search path, или '-' для чтения из stdin",
    )
    sp_render.add_argument(
        "--context",
        metavar="FILE",
        help="YAML или JSON файл с контекстом рендеринга (отображение)",
    )
    sp_render.add_argument(
        "--string",
        action="store_true",
        help="трактовать TEMPLATE как текст шаблона, а не как идентификатор",
    )
    add_common(sp_render)

    sp_tags = sub.add_parser("tags", help="Список зарегистрированных тегов (JSON)")
    add_common(sp_tags)

    return p


def _make_env(ns: argparse.Namespace) -> Environment:
    config = load_config(ns.config) if ns.config else EngineConfig()
    return Environment(search_path=ns.search_path, config=config)


def _load_context(path: Optional[str]) -> Dict[str, Any]:
    """Читает контекст из YAML/JSON файла (JSON — подмножество YAML)."""
    if not path:
        return {}
    context_path = Path(path)
    if not context_path.is_file():
        raise ValueError(f"Context file not found: {context_path}")
    return read_yaml_map(context_path)


def _list_tags(env: Environment) -> Dict[str, Any]:
    return {
        "tags": [
            {"name": name, "family": route.family, "role": route.role.value}
            for name, route in sorted(env.registry.routes.items())
        ]
    }


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)

    if ns.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        env = _make_env(ns)

        if ns.cmd == "render":
            context = _load_context(ns.context)
            if ns.string:
                text = env.render_string_sync(ns.template, context)
            elif ns.template == "-":
                text = env.render_string_sync(sys.stdin.read(), context, template_name="(stdin)")
            else:
                text = env.render_sync(ns.template, context)
            sys.stdout.write(text)
            return 0

        if ns.cmd == "tags":
            sys.stdout.write(json.dumps(_list_tags(env), ensure_ascii=False, indent=2) + "\n")
            return 0

    except TmplUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except (ValueError, FileNotFoundError) as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
