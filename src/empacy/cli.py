"""``empacy`` command line entry point.

Usage:
    empacy serve [--transport stdio|http] [--host HOST] [--port PORT]
    empacy health
    empacy config
    empacy export-language --input language.yaml [--output out.yaml]
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from dotenv import load_dotenv

from empacy.config import EmpacyConfig
from empacy.config import load_config
from empacy.config import LoggingConfig
from empacy.coordinator import Coordinator
from empacy.errors import EmpacyError
from empacy.language import UbiquitousLanguageManager

logger = logging.getLogger(__name__)

TRANSPORTS = ("stdio", "http")


def configure_logging(config: LoggingConfig) -> None:
    """Send all log records to stderr so stdout stays free for stdio MCP."""
    logging.basicConfig(
        level=getattr(logging, config.level, logging.INFO),
        format=config.format,
        stream=sys.stderr,
        force=True,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="empacy",
        description="Multi-agent coordination MCP server.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the MCP server.")
    serve.add_argument("--transport", choices=TRANSPORTS, default=None)
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    sub.add_parser("health", help="Print the health report as JSON.")
    sub.add_parser("config", help="Print the effective configuration as JSON.")

    export = sub.add_parser(
        "export-language",
        help="Load a ubiquitous language YAML file and re-export it normalized.",
    )
    export.add_argument("--input", required=True, type=Path)
    export.add_argument("--output", type=Path, default=None)
    return parser


def _serve(config: EmpacyConfig, args: argparse.Namespace) -> int:
    from empacy.server import configure
    from empacy.server import mcp

    server_cfg = dataclasses.replace(
        config.server,
        transport=args.transport or config.server.transport,
        host=args.host or config.server.host,
        port=args.port if args.port is not None else config.server.port,
    )
    if server_cfg.transport not in TRANSPORTS:
        logger.error("Unsupported transport: %s", server_cfg.transport)
        return 2

    asyncio.run(configure(dataclasses.replace(config, server=server_cfg)))
    logger.info("Starting Empacy MCP server over %s", server_cfg.transport)
    if server_cfg.transport == "http":
        mcp.run(transport="http", host=server_cfg.host, port=server_cfg.port)
    else:
        mcp.run(transport="stdio")
    return 0


def _health(config: EmpacyConfig) -> int:
    report = Coordinator(config).health()
    print(json.dumps(report, indent=2))
    return 0 if report["healthy"] else 1


def _config(config: EmpacyConfig) -> int:
    print(json.dumps(dataclasses.asdict(config), indent=2))
    return 0


def _export_language(config: EmpacyConfig, args: argparse.Namespace) -> int:
    manager = UbiquitousLanguageManager(config=config.language)
    try:
        counts = manager.import_from_yaml(args.input.read_text(encoding="utf-8"))
    except (OSError, EmpacyError) as exc:
        logger.error("Failed to load %s: %s", args.input, exc)
        return 1

    document = manager.export_to_yaml()
    if args.output is None:
        sys.stdout.write(document)
    else:
        args.output.write_text(document, encoding="utf-8")
        logger.info(
            "Exported %d concepts to %s", counts["totalConcepts"], args.output
        )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    args = _build_parser().parse_args(argv)
    try:
        config = load_config()
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    configure_logging(config.logging)

    if args.command == "serve":
        return _serve(config, args)
    if args.command == "health":
        return _health(config)
    if args.command == "config":
        return _config(config)
    return _export_language(config, args)


if __name__ == "__main__":
    raise SystemExit(main())
