"""Command line runner: execute a PxL script file and print its results."""

import argparse
import asyncio
import json
import sys

from tabulate import tabulate

from pixie_gateway.config.provider import build_config_provider
from pixie_gateway.logging_config import configure_logging
from pixie_gateway.modules.query import (
    GatewayError,
    QueryResult,
    QueryService,
    pixie_client_factory,
    read_script_file,
)


def truncate_value(value, max_width):
    """Truncate a value to max_width characters."""
    if max_width <= 0 or len(value) <= max_width:
        return value
    return value[: max_width - 3] + "..."


def render(result: QueryResult, output_format: str, max_colwidth: int = 50) -> str:
    """Render a query result as JSON or a plain-text table."""
    if output_format == "json":
        return json.dumps(result.to_dict(), indent=2, default=str)

    if not result.result.rows:
        return "no data"
    rows = [[truncate_value(cell, max_colwidth) for cell in row] for row in result.result.rows]
    headers = result.result.columns or ()
    return tabulate(rows, headers=headers, tablefmt="simple")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixie-query",
        description="Run a PxL script on a Pixie cluster and print the results",
    )
    parser.add_argument("script_file", help="Path of the .pxl script to execute")
    parser.add_argument(
        "--config",
        default="config.json",
        help="Pixie config file, JSON or YAML (default: config.json)",
    )
    parser.add_argument(
        "--config-source",
        choices=["file", "env"],
        default="file",
        help="Read credentials from the config file or from PX_* environment variables",
    )
    parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument(
        "--max-colwidth",
        type=int,
        default=50,
        help="Maximum column width for table format (default: 50, 0 for unlimited)",
    )
    parser.add_argument("--session-timeout", type=float, default=60)
    parser.add_argument("--execution-timeout", type=float, default=60)
    parser.add_argument(
        "--no-encryption",
        action="store_true",
        help="Do not request end-to-end encryption of results",
    )
    parser.add_argument("--log-level", default="WARNING")
    return parser


def main(argv=None, client_factory=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, stream="ext://sys.stderr")

    service = QueryService(
        config_provider=build_config_provider(args.config_source, args.config),
        client_factory=client_factory or pixie_client_factory(use_encryption=not args.no_encryption),
        session_timeout=args.session_timeout,
        execution_timeout=args.execution_timeout,
    )

    try:
        script = read_script_file(args.script_file)
        result = asyncio.run(service.run(script))
    except GatewayError as e:
        print(f"error ({e.status_code}): {e.message}", file=sys.stderr)
        return 1

    print(render(result, args.format, args.max_colwidth))
    return 0


if __name__ == "__main__":
    sys.exit(main())
