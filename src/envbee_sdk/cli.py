"""
Command-line interface for the envbee SDK.

Commands:
    envbee get NAME [--json]
    envbee list [--offset N] [--limit N] [--format table|json|csv]

Credentials come from the config file or ENVBEE_API_KEY / ENVBEE_API_SECRET /
ENVBEE_ENC_KEY.

Uses Python's argparse module (no external CLI libraries).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn

from envbee_sdk import __version__
from envbee_sdk.client import ConfigClient
from envbee_sdk.config.settings import load_config
from envbee_sdk.errors import ConfigurationError, EnvbeeError

logger = logging.getLogger(__name__)

# Global verbosity settings (set during main() based on args)
_quiet_mode = False


def set_output_mode(quiet: bool = False) -> None:
    """Set whether non-essential output is suppressed."""
    global _quiet_mode
    _quiet_mode = quiet


def output(message: str = "", force: bool = False) -> None:
    """
    Print a message to stdout, respecting quiet mode.

    Args:
        message: The message to print.
        force: If True, print even in quiet mode (for command results).
    """
    if force or not _quiet_mode:
        print(message)


def output_error(message: str) -> None:
    """Print an error message (always shown, even in quiet mode)."""
    print(message, file=sys.stderr)


def format_as_csv(headers: list[str], rows: list[list[Any]]) -> str:
    """Format rows as a CSV string."""
    import csv
    import io

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the envbee CLI."""
    parser = argparse.ArgumentParser(
        prog="envbee",
        description="Read configuration variables from envbee",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"envbee {__version__}",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Override config file location (default: ~/.envbee/config.yaml)",
    )
    parser.add_argument(
        "--api-url",
        metavar="URL",
        help="Override the envbee API URL",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (can be repeated)",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    subparsers = parser.add_subparsers(dest="command", title="commands")

    get_parser = subparsers.add_parser("get", help="Print the value of a variable")
    get_parser.add_argument("name", help="Variable name")
    get_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the value JSON-encoded",
    )
    get_parser.set_defaults(func=cmd_get)

    list_parser = subparsers.add_parser("list", help="List variables")
    list_parser.add_argument("--offset", type=int, default=None, help="Variables to skip")
    list_parser.add_argument("--limit", type=int, default=None, help="Page size")
    list_parser.add_argument(
        "--format",
        choices=["table", "json", "csv"],
        default="table",
        help="Output format (default: table)",
    )
    list_parser.set_defaults(func=cmd_list)

    return parser


def setup_logging(verbose: int, quiet: bool) -> None:
    """Configure logging based on verbosity level."""
    if quiet:
        level = logging.WARNING
    elif verbose == 0:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_client(args: argparse.Namespace) -> ConfigClient:
    """
    Build a ConfigClient from the config file, environment and CLI flags.

    Raises:
        ConfigurationError: If settings or credentials are invalid.
    """
    config_path = Path(args.config) if getattr(args, "config", None) else None
    settings = load_config(config_path)
    if getattr(args, "api_url", None):
        settings.api_url = args.api_url

    client = ConfigClient.from_settings(settings)
    # -v/-q take precedence over log_level from settings
    if args.verbose or args.quiet:
        client.set_log_level(logging.getLogger().level)
    return client


def cmd_get(args: argparse.Namespace) -> int:
    """Print the value of one variable."""
    with build_client(args) as client:
        try:
            value = client.get(args.name)
        except EnvbeeError as e:
            output_error(f"Error: {e}")
            return 1

    if args.json:
        output(json.dumps(value), force=True)
    elif isinstance(value, str):
        output(value, force=True)
    else:
        output(json.dumps(value), force=True)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """Print a page of variables."""
    with build_client(args) as client:
        try:
            response = client.get_variables(offset=args.offset, limit=args.limit)
        except EnvbeeError as e:
            output_error(f"Error: {e}")
            return 1

    data = response.get("data", []) if isinstance(response, dict) else []
    metadata = response.get("metadata", {}) if isinstance(response, dict) else {}

    if args.format == "json":
        output(json.dumps(response, indent=2), force=True)
        return 0

    headers = ["name", "type", "description"]
    rows = [[item.get(h, "") or "" for h in headers] for item in data]

    if args.format == "csv":
        output(format_as_csv(headers, rows).rstrip("\n"), force=True)
        return 0

    widths = [
        max([len(h)] + [len(str(row[i])) for row in rows]) for i, h in enumerate(headers)
    ]
    output("  ".join(h.upper().ljust(widths[i]) for i, h in enumerate(headers)), force=True)
    for row in rows:
        output("  ".join(str(v).ljust(widths[i]) for i, v in enumerate(row)), force=True)

    total = metadata.get("total")
    if total is not None:
        output()
        output(
            f"Showing {len(rows)} of {total} "
            f"(offset {metadata.get('offset', 0)}, limit {metadata.get('limit', len(rows))})"
        )
    return 0


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the envbee CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.quiet)
    set_output_mode(args.quiet)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        exit_code = args.func(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        output("\nOperation cancelled.")
        sys.exit(130)
    except ConfigurationError as e:
        output_error(f"Configuration error: {e}")
        sys.exit(2)
    except Exception as e:
        if args.verbose > 0:
            raise
        output_error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
