#!/usr/bin/env python3

import argparse
import logging
from collections.abc import Callable, Sequence

from tallyscan.runtime import set_log_level


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Run a command handler that may call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Receipt OCR text extraction CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  parse <ocr-file>           Extract a structured receipt from an OCR dump
  stitch <ocr-file>          Print the logical lines stitched from an OCR dump

OCR dumps are plain text (one line per row) or a .json OCR engine result.
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # parse command
    parse_parser = subparsers.add_parser("parse", help="Extract a structured receipt from an OCR dump")
    parse_parser.add_argument("ocr_file", help="Path to OCR text or JSON file")
    parse_parser.add_argument(
        "--rules-only",
        action="store_true",
        help="Skip assistants and use only the rule-based parser",
    )
    parse_parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parse_parser.add_argument(
        "--config",
        default=None,
        help="Assistant settings TOML (default: ~/.config/tallyscan/config.toml)",
    )

    # stitch command
    stitch_parser = subparsers.add_parser("stitch", help="Print logical lines stitched from an OCR dump")
    stitch_parser.add_argument("ocr_file", help="Path to OCR text or JSON file")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.verbose:
        set_log_level(logging.DEBUG)

    if args.command == "parse":
        from tallyscan.cli.receipt import cmd_parse

        return _run_command(cmd_parse, args)
    elif args.command == "stitch":
        from tallyscan.cli.receipt import cmd_stitch

        return _run_command(cmd_stitch, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
