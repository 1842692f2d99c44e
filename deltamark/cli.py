"""Command-line interface for deltamark.

WHY: Stored documents sometimes need converting or inspecting outside an
editor: migrating delta JSON to markdown, checking what a stored markdown
string loads as, or finding out which glyph an embed key stands for.

HOW: argparse with three subcommands. ``emit`` reads delta JSON and writes
markdown, ``parse`` reads markdown and writes delta JSON, ``emoji``
resolves a variant key or a glyph through the registry. Status messages
go to stderr so stdout can be piped.

RULES:
- "-" as input reads stdin; "-o -" (the default) writes stdout
- Files are read and written as UTF-8
- Errors print "Error: ..." to stderr and exit with status 1
- The log level comes from DELTAMARK_LOG_LEVEL unless --verbose is given
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from deltamark import __version__
from deltamark.adapters.delta import document_from_delta, document_to_delta
from deltamark.config import load_log_level
from deltamark.core.registry import get_registry, is_variant_key
from deltamark.errors import DeltamarkError
from deltamark.markdown.emitter import MarkdownEmitter
from deltamark.markdown.parser import MarkdownParser


def _status(msg: str) -> None:
    """Print a status message to stderr, flushed immediately."""
    print(msg, file=sys.stderr, flush=True)


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _write_output(path: str, content: str) -> None:
    if path == "-":
        sys.stdout.write(content)
        if not content.endswith("\n"):
            sys.stdout.write("\n")
        return
    Path(path).write_text(content, encoding="utf-8")
    _status("Saved: {}".format(path))


def _cmd_emit(args: argparse.Namespace) -> None:
    data = json.loads(_read_input(args.input))
    document = document_from_delta(data)
    _status("Loaded {} operations ({} embeds)".format(len(document), len(document.embeds())))
    _write_output(args.output, MarkdownEmitter().emit(document))


def _cmd_parse(args: argparse.Namespace) -> None:
    document = MarkdownParser().parse(_read_input(args.input))
    _status("Parsed {} lines into {} operations".format(len(document.lines()), len(document)))
    payload = document_to_delta(document)
    _write_output(args.output, json.dumps(payload, indent=2, ensure_ascii=args.ascii))


def _cmd_emoji(args: argparse.Namespace) -> None:
    registry = get_registry()
    query = args.query
    if is_variant_key(query.upper()):
        entry = registry.resolve_key(query.upper())
    else:
        entry = registry.resolve_key(registry.resolve_value(query))
    print("{}\t{}\t{}".format(entry.key, entry.value, entry.name))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="deltamark",
        description="Convert rich-text delta documents to markdown and back, "
                    "keeping emoji embeds intact.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log at DEBUG level (default: DELTAMARK_LOG_LEVEL).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    emit_parser = subparsers.add_parser("emit", help="Delta JSON to markdown.")
    emit_parser.add_argument("input", help="Delta JSON file, or '-' for stdin.")
    emit_parser.add_argument("-o", "--output", default="-", help="Output file (default: stdout).")
    emit_parser.set_defaults(func=_cmd_emit)

    parse_parser = subparsers.add_parser("parse", help="Markdown to delta JSON.")
    parse_parser.add_argument("input", help="Markdown file, or '-' for stdin.")
    parse_parser.add_argument("-o", "--output", default="-", help="Output file (default: stdout).")
    parse_parser.add_argument(
        "--ascii",
        action="store_true",
        help="Escape all non-ASCII characters in the JSON output.",
    )
    parse_parser.set_defaults(func=_cmd_parse)

    emoji_parser = subparsers.add_parser("emoji", help="Look up an emoji by key or glyph.")
    emoji_parser.add_argument("query", help="Variant key (e.g. 1F600) or the glyph itself.")
    emoji_parser.set_defaults(func=_cmd_emoji)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``deltamark`` and ``python -m deltamark``.

    argv=None means use sys.argv; explicit argv is for testing.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        level = logging.DEBUG if args.verbose else load_log_level()
    except ValueError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        args.func(args)
    except (DeltamarkError, ValueError, OSError) as e:
        # json.JSONDecodeError is a ValueError
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
