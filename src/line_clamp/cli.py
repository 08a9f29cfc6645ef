"""Command-line interface for line-clamp."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys
from typing import Any, Iterable, Optional

from rich.console import Console
from rich.errors import MarkupError
from rich.text import Text

from line_clamp.config import ClampOptions, load_options, merge_options, save_options
from line_clamp.controller import ClampResult, ClampValueError, clamp, clamp_async
from line_clamp.layout import RichLayoutEngine
from line_clamp.logging_setup import init_logging, set_console_level
from line_clamp.nodes import Element

logger = logging.getLogger(__name__)


def _clamp_value(value: str) -> int | str:
    return int(value) if value.strip().isdigit() else value


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="line-clamp",
        description="Clamp Rich markup to a number of rendered lines",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default="",
        help="Markup file to clamp (reads stdin when omitted)",
    )
    parser.add_argument(
        "-n",
        "--lines",
        type=_clamp_value,
        default=None,
        help="Line count, 'auto', or a CSS length such as 40px",
    )
    parser.add_argument("-w", "--width", type=int, default=None, help="Columns")
    parser.add_argument(
        "--split-on",
        default=None,
        help="Boundary characters to cut on, coarsest first",
    )
    parser.add_argument("--truncation-char", default=None, help="Marker text")
    parser.add_argument(
        "--truncation-markup",
        default=None,
        help="Markup inserted before the marker",
    )
    parser.add_argument(
        "--no-native",
        action="store_true",
        help="Always use the truncation engine",
    )
    parser.add_argument(
        "--animate",
        type=int,
        default=None,
        metavar="MS",
        help="Pause between truncation steps in milliseconds",
    )
    parser.add_argument("--config", default=None, help="Options file (JSON)")
    parser.add_argument(
        "--save-defaults",
        action="store_true",
        help="Store the resulting options as defaults",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Print clamped markup instead of rendering it",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Open the interactive preview",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logs")
    return parser


def _options_from_args(args: argparse.Namespace) -> ClampOptions:
    base = load_options(Path(args.config) if args.config else None)
    overrides: dict[str, Any] = {}
    if args.lines is not None:
        overrides["clamp"] = args.lines
    if args.split_on is not None:
        overrides["split_on_chars"] = tuple(args.split_on)
    if args.truncation_char is not None:
        overrides["truncation_char"] = args.truncation_char
    if args.truncation_markup is not None:
        overrides["truncation_markup"] = args.truncation_markup
    if args.no_native:
        overrides["use_native_clamp"] = False
    if args.animate is not None:
        overrides["animate"] = args.animate
    return merge_options(base, **overrides)


def _read_source(path: str) -> str:
    if path:
        return Path(path).read_text(encoding="utf-8")
    return sys.stdin.read()


def _run_preview(markup: str, options: ClampOptions) -> int:
    try:
        from line_clamp.ui.preview import run_preview
    except ImportError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return run_preview(markup, options)


def _emit(
    console: Console,
    layout: RichLayoutEngine,
    element: Element,
    result: ClampResult,
    *,
    raw: bool,
) -> None:
    markup = result.clamped if result.clamped is not None else element.inner_markup
    if raw:
        console.print(markup, markup=False, highlight=False, soft_wrap=True)
        return
    if "-webkit-line-clamp" in element.style:
        console.print(layout.render(element))
        return
    console.print(Text.from_markup(markup), width=layout.width)


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    init_logging(console_level=logging.WARNING)
    if args.verbose:
        set_console_level(logging.DEBUG)

    def excepthook(exc_type, exc, tb) -> None:
        logger.exception("Uncaught exception", exc_info=(exc_type, exc, tb))

    sys.excepthook = excepthook

    options = _options_from_args(args)
    if args.save_defaults:
        saved = save_options(options, Path(args.config) if args.config else None)
        logger.info("Saved defaults to %s", saved)

    try:
        markup = _read_source(args.path)
    except OSError as exc:
        print(f"Cannot read {args.path}: {exc}", file=sys.stderr)
        return 1
    markup = markup.rstrip("\n")

    if args.preview:
        return _run_preview(markup, options)

    console = Console()
    layout = RichLayoutEngine(width=args.width or console.width)
    try:
        element = Element.from_markup(markup)
        if options.animate:
            result = asyncio.run(clamp_async(element, options, layout=layout))
        else:
            result = clamp(element, options, layout=layout)
    except (MarkupError, ClampValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    _emit(console, layout, element, result, raw=args.raw)
    logger.info("Clamped %d characters of markup", len(result.original))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
