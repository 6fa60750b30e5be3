import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List

from rich import print
from rich.logging import RichHandler
from rich.markup import escape

from ..utils.config import Settings, load_config
from ..utils.store import InMemoryHost
from .errors import ScaffoldError
from .host import TemplateSource
from .layout import load_layout
from .renderer import DEFAULT_TEMPLATES_ROOT, TemplateLibrary, TemplateRenderer
from .replacer import IncompletePolicy, find_keys, resolve, resolve_script


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="scaffoldkit",
        description="Scaffold directories and files from #MARKER# templates.",
    )
    p.add_argument("--config", "-c", type=Path, default=None, help="Settings file (default: config/scaffoldkit.yml)")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("scaffold", help="Apply a YAML layout")
    s.add_argument("layout", type=Path, help="Layout file")
    s.add_argument("--out", "-o", type=Path, default=None, help="Output directory")
    s.add_argument("--templates", "-t", type=Path, default=None, help="Templates directory")
    s.add_argument("--strict", action="store_true", help="Treat incomplete markers as errors")
    s.add_argument("--dry-run", action="store_true", help="List what would be created without writing")

    r = sub.add_parser("render", help="Resolve a single template file")
    r.add_argument("template", type=Path, help="Template file")
    r.add_argument("--define", "-D", action="append", default=[], metavar="KEY=VALUE", help="Replacement entry")
    r.add_argument("--name", "-n", default=None, help="Script name (sets SCRIPTNAME, NAME, SCRIPTNAME_LOWER)")
    r.add_argument("--strict", action="store_true", help="Treat incomplete markers as errors")
    r.add_argument("--out", "-o", type=Path, default=None, help="Output file (default: stdout)")

    t = sub.add_parser("templates", help="List available templates")
    t.add_argument("--templates", "-t", type=Path, default=None, help="Templates directory")
    return p


def parse_defines(pairs: List[str]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid definition (expected KEY=VALUE): {pair}")
        values[key] = value
    return values


def _policy(strict: bool) -> IncompletePolicy:
    return IncompletePolicy.STRICT if strict else IncompletePolicy.LENIENT


def _templates_root(arg, settings: Settings) -> Path:
    return arg or settings.templates_dir or DEFAULT_TEMPLATES_ROOT


def cmd_scaffold(args, settings: Settings) -> int:
    layout = load_layout(args.layout)
    if args.strict or settings.strict:
        layout.strict = True
    out_dir = (args.out or settings.out).resolve()
    renderer = TemplateRenderer(_templates_root(args.templates, settings))
    host = renderer.scaffold(layout, out_dir, InMemoryHost.from_disk(out_dir) if args.dry_run else None)
    for entry in host.index:
        print(f"  {escape(entry)}")
    if args.dry_run:
        print(f"[yellow]Dry run, nothing written:[/] {out_dir}")
    else:
        print(f"[green]✅ Scaffolding complete:[/] {out_dir}")
    return 0


def cmd_render(args, settings: Settings) -> int:
    source = TemplateSource.from_path(args.template)
    replacements = parse_defines(args.define)
    policy = _policy(args.strict or settings.strict)
    if args.name is None:
        missing = [k for k in find_keys(source.text) if k not in replacements]
        if missing:
            raise ValueError(f"Missing replacements: {', '.join(missing)}")
        text = resolve(source.text, replacements, policy)
    else:
        text = resolve_script(args.name, source.text, replacements, policy)

    if args.out is None:
        sys.stdout.write(text)
    else:
        args.out.write_text(text, encoding="utf-8")
        print(f"[green]✅ Wrote[/] {args.out}")
    return 0


def cmd_templates(args, settings: Settings) -> int:
    root = _templates_root(args.templates, settings)
    for name in TemplateLibrary(root).names():
        print(name)
    return 0


COMMANDS = {
    "scaffold": cmd_scaffold,
    "render": cmd_render,
    "templates": cmd_templates,
}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_config(args.config)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )
    try:
        return COMMANDS[args.command](args, settings)
    except ScaffoldError as e:
        print(f"[red]✗ {e.kind}:[/] {escape(str(e))}")
    except (OSError, ValueError) as e:
        print(f"[red]✗ {type(e).__name__}:[/] {escape(str(e))}")
    return 1
