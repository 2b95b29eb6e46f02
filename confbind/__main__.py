#!/usr/bin/env python3
r"""confbind CLI.

Commands:
    python -m confbind --version     Show version
    python -m confbind info          Show version and dependency info
    python -m confbind bind NAME     Bind a property and print it as JSON

Examples:
    # Show version and dependency info (for bug reports)
    python -m confbind info

    # Bind a list from inline properties
    python -m confbind bind servers --type list --set servers=a,b

    # Bind a map from the environment (SERVER_HOST, SERVER_PORT, ...)
    python -m confbind bind server --type dict --env
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional, Sequence

_TYPES: Dict[str, Any] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "list": List[str],
    "dict": Dict[str, Any],
}


def cmd_info(args: argparse.Namespace) -> int:
    """Show version and dependency information."""
    from ._version import print_version_info

    print_version_info()
    return 0


def parse_assignments(assignments: Sequence[str]) -> Dict[str, str]:
    """Parse ``key=value`` pairs.

    Raises:
        ValueError: If an assignment has no ``=``.
    """
    properties: Dict[str, str] = {}
    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {assignment!r}")
        properties[key.strip()] = value
    return properties


def cmd_bind(args: argparse.Namespace) -> int:
    """Bind ``args.name`` from the given properties and print the result."""
    from .core import Binder, BindHandler, LoggingBindHandler, NoUnboundElementsBindHandler
    from .sources import EnvironmentPropertySource, MapPropertySource
    from .utils import BindError, configure_logging

    if args.verbose:
        configure_logging("DEBUG")

    try:
        properties = parse_assignments(args.set or [])
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    sources: List[Any] = [MapPropertySource(properties, "command line")]
    if args.env:
        sources.append(EnvironmentPropertySource(prefix=args.env_prefix))
    binder = Binder.from_sources(sources)

    handler: BindHandler = BindHandler.DEFAULT
    if args.verbose:
        handler = LoggingBindHandler(handler)
    if args.strict:
        handler = NoUnboundElementsBindHandler(handler)

    try:
        result = binder.bind(args.name, _TYPES[args.type], handler)
    except BindError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not result.is_bound():
        print("<unbound>")
        return 1
    print(json.dumps(result.get(), default=str, indent=args.indent))
    return 0


def build_parser() -> argparse.ArgumentParser:
    from ._version import __version__

    parser = argparse.ArgumentParser(
        prog="python -m confbind",
        description="confbind - typed configuration binding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m confbind --version                          Show version
  python -m confbind info                               Show version and dependency info
  python -m confbind bind server.port --type int --env  Bind from the environment
        """,
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"confbind {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # info command
    info_parser = subparsers.add_parser(
        "info",
        help="Show version and dependency information",
        description="Display the confbind, Python and dependency versions.",
    )
    info_parser.set_defaults(func=cmd_info)

    # bind command
    bind_parser = subparsers.add_parser(
        "bind",
        help="Bind a property name and print the value as JSON",
        description="Bind NAME from --set properties (first) and the environment (second).",
    )
    bind_parser.add_argument("name", help="Property name, e.g. server.port or servers[0]")
    bind_parser.add_argument(
        "--type",
        "-t",
        choices=sorted(_TYPES),
        default="str",
        help="Target type (default: str)",
    )
    bind_parser.add_argument(
        "--set",
        "-s",
        action="append",
        metavar="KEY=VALUE",
        help="Property to bind from (repeatable)",
    )
    bind_parser.add_argument(
        "--env",
        "-e",
        action="store_true",
        help="Also bind from environment variables",
    )
    bind_parser.add_argument(
        "--env-prefix",
        help="Only use environment variables starting with PREFIX_",
    )
    bind_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when properties below NAME are left unbound",
    )
    bind_parser.add_argument(
        "--indent",
        type=int,
        default=None,
        help="Indent the JSON output",
    )
    bind_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every bind step",
    )
    bind_parser.set_defaults(func=cmd_bind)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for confbind."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
