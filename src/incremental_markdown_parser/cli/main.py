"""Main CLI entry point for the incremental-md command-line tool.

Parses a Markdown-like document and prints its tokens, the tree outline, the
nested JSON tree or the flat parent-id records.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from incremental_markdown_parser import __version__
from incremental_markdown_parser.api import parse
from incremental_markdown_parser.shared import (
    ConfigError,
    MarkdownTreeError,
    ParserConfig,
)
from incremental_markdown_parser.tokenization import tokenize
from incremental_markdown_parser.tree import Node

OUTPUT_FORMATS = ("outline", "json", "records")
STDIN_PATH = "-"


def read_input(path: str) -> str:
    """Read the document at ``path``, or standard input for ``-``."""
    if path == STDIN_PATH:
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def load_config(config_path: Optional[Path]) -> ParserConfig:
    """Load a JSON parser configuration, or the defaults when no path is given."""
    if config_path is None:
        return ParserConfig()
    return ParserConfig.from_json(config_path.read_text(encoding="utf-8"))


def format_outline(node: Node) -> str:
    """Render the tree one node per line, indented by depth."""
    lines = []

    def _line(current: Node) -> None:
        label = current.element.value
        if current.value:
            label += f" {current.value!r}"
        lines.append("  " * current.depth + label)

    node.visit(_line)
    return "\n".join(lines)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="incremental-md",
        description="Incremental Markdown parser: tokens, document trees and records"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON parser configuration file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Parse a document into a tree")
    parse_parser.add_argument(
        "path",
        help="Document to parse ('-' reads standard input)"
    )
    parse_parser.add_argument(
        "--format", "-f",
        choices=OUTPUT_FORMATS,
        default="outline",
        help="Output format (default: outline)"
    )
    parse_parser.add_argument(
        "--no-group",
        action="store_true",
        help="Do not synthesize paragraph and list containers"
    )
    parse_parser.add_argument(
        "--metrics",
        action="store_true",
        help="Print parse metrics to stderr"
    )

    # Tokens command
    tokens_parser = subparsers.add_parser("tokens", help="Print the token stream")
    tokens_parser.add_argument(
        "path",
        help="Document to tokenize ('-' reads standard input)"
    )
    tokens_parser.add_argument(
        "--no-group",
        action="store_true",
        help="Do not emit grouping tokens"
    )

    return parser


def cmd_parse(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle parse command."""
    overrides = {}
    if args.no_group:
        overrides["tokenization__group"] = False
    if args.metrics:
        overrides["global___enable_metrics"] = True
    if overrides:
        config = config.override(**overrides)

    result = parse(read_input(args.path), config=config)

    if args.format == "json":
        print(result.tree.to_json(indent=2))
    elif args.format == "records":
        print(json.dumps(result.tree.to_records(), indent=2))
    else:
        print(format_outline(result.tree))

    if result.metrics is not None:
        print(json.dumps(result.metrics.to_dict(), indent=2), file=sys.stderr)

    return 0


def cmd_tokens(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle tokens command."""
    group = config.tokenization.group and not args.no_group
    tokens = tokenize(
        read_input(args.path),
        group=group,
        ignore_html_blocks=config.tokenization.ignore_html_blocks,
    )

    for token in tokens:
        if token.is_ghost:
            print(f"-:- {token.element.value} (group)")
        else:
            print(f"{token.line}:{token.column} {token.element.value} {token.value!r}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
    except (OSError, ValueError, ConfigError) as e:
        print(f"Could not load configuration: {e}", file=sys.stderr)
        return 1

    # Set up logging verbosity
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = getattr(logging, config.global_.logging_level)
    logging.basicConfig(level=level)

    try:
        if args.command == "parse":
            return cmd_parse(args, config)
        if args.command == "tokens":
            return cmd_tokens(args, config)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    except OSError as e:
        print(f"Could not read input: {e}", file=sys.stderr)
        return 1
    except MarkdownTreeError as e:
        print(f"Parse failed: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
