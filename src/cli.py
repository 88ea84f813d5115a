"""
Command-line interface for regenerating Ruby source from serialized ASTs.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from converter import ConversionError, to_source
from loader import AstLoadError, LoadResult, load_ast
from syntax import dump_tree


def _print_diagnostics(messages: List[str]) -> None:
    for message in messages:
        sys.stderr.write(message + "\n")


def _load(args: argparse.Namespace) -> Optional[LoadResult]:
    input_path = Path(args.input).resolve()
    if not input_path.exists():
        sys.stderr.write(f"ERROR: Input file not found: {input_path}\n")
        return None

    try:
        source = input_path.read_text(encoding="utf-8")
    except OSError as exc:
        sys.stderr.write(f"ERROR: Failed to read {input_path}: {exc}\n")
        return None

    try:
        result = load_ast(source, source_name=str(input_path), tolerant=not args.strict)
    except AstLoadError as exc:
        sys.stderr.write(f"ERROR {input_path}: {exc}\n")
        return None

    if result.ast is None:
        sys.stderr.write("ERROR: Loading failed; no AST produced.\n")
        _print_diagnostics([f"  {issue.description}" for issue in result.issues])
        return None
    return result


def convert_command(args: argparse.Namespace) -> int:
    result = _load(args)
    if result is None:
        return 1

    try:
        source = to_source(result.ast)
    except ConversionError as exc:
        sys.stderr.write(f"ERROR {result.source_name}: Conversion failed: {exc}\n")
        return 1

    if args.out:
        output_path = Path(args.out)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(source + "\n", encoding="utf-8")
    else:
        sys.stdout.write(source + "\n")
    return 0


def dump_command(args: argparse.Namespace) -> int:
    result = _load(args)
    if result is None:
        return 1
    sys.stdout.write(dump_tree(result.ast) + "\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rbregen", description="Regenerate Ruby source from a JSON AST dump"
    )
    subparsers = parser.add_subparsers(dest="command")

    convert_parser = subparsers.add_parser("convert", help="Convert an AST dump to Ruby source")
    convert_parser.add_argument("input", help="Path to the JSON AST dump")
    convert_parser.add_argument("--out", help="Output file path (defaults to stdout)")
    convert_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on the first malformed part of the dump instead of reporting it.",
    )
    convert_parser.set_defaults(func=convert_command)

    dump_parser = subparsers.add_parser("dump", help="Print the AST dump as an indented tree")
    dump_parser.add_argument("input", help="Path to the JSON AST dump")
    dump_parser.add_argument("--strict", action="store_true", help="Strict loading.")
    dump_parser.set_defaults(func=dump_command)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
