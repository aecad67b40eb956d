from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from sourcecheck.infrastructure.config import AppConfig, load_config
from sourcecheck.infrastructure.logging.setup import configure_logging
from sourcecheck.interfaces.composition import (
    build_http_client,
    build_source_check_use_case,
)
from sourcecheck.interfaces.main import build_app

log = structlog.get_logger(__name__)


def _add_config_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="sourcecheck")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument(
        "--host",
        default=None,
        help="Bind host (overrides HOST env).",
    )
    serve.add_argument(
        "--port",
        default=None,
        type=int,
        help="Bind port (overrides PORT env).",
    )
    _add_config_flags(serve)

    check = sub.add_parser("check", help="Validate video source URLs once.")
    check.add_argument("urls", nargs="+", help="Source URLs to validate.")
    check.add_argument(
        "--correlation-id",
        default=None,
        help="Correlation id for log lines (single URL only).",
    )
    check.add_argument(
        "--timeout",
        default=None,
        type=float,
        help="Override per-step probe timeout (seconds).",
    )
    _add_config_flags(check)

    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.command == "check" and args.correlation_id and len(args.urls) > 1:
        check.error("--correlation-id accepts a single URL only")
    return args


def _load(args: argparse.Namespace) -> AppConfig:
    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    elif args.command == "check":
        # Keep stdout for the JSON result unless asked otherwise.
        cli_overrides["log_level"] = "ERROR"
    if args.log_format:
        cli_overrides["log_format"] = args.log_format
    if getattr(args, "timeout", None) is not None:
        cli_overrides["source_check_timeout_seconds"] = args.timeout

    return load_config(
        config_path=Path(args.config) if args.config else None,
        dotenv_path=Path(args.dotenv) if args.dotenv else None,
        cli_overrides=cli_overrides,
    )


async def _run_check(
    config: AppConfig, urls: list[str], correlation_id: str | None
) -> int:
    async with build_http_client(config) as http_client:
        use_case = build_source_check_use_case(config, http_client)
        if len(urls) == 1:
            outcomes = [await use_case.execute(urls[0], correlation_id)]
        else:
            outcomes = await use_case.execute_batch(urls)

    payload = [o.to_dict() for o in outcomes]
    print(json.dumps(payload[0] if len(payload) == 1 else payload, indent=2))
    return 0 if all(o.valid for o in outcomes) else 1


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config exactly once, then either serves the API or runs a
    one-shot check. ``check`` exits 0 only when every URL is valid.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)
    config = _load(args)
    log_config = configure_logging(config)

    if args.command == "check":
        return asyncio.run(_run_check(config, args.urls, args.correlation_id))

    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = int(args.port or os.getenv("PORT", "8080"))
    uvicorn.run(
        build_app(config),
        host=host,
        port=port,
        log_config=log_config,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(start())
