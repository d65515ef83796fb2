#!/usr/bin/env python3
"""Run the Contracts Server mock as its own process."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .logging_conf import get_logger, level_from_verbosity, setup_logging
from .server import MockServer
from .settings import default_settings, dump_settings, load_settings

logger = get_logger("contracts_mock.cli")


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the mock server."""
    parser = argparse.ArgumentParser(
        prog="contracts-mock", description="A mock Contracts Server backend for testing"
    )
    parser.add_argument(
        "-v", "--verbosity", action="count", default=0, help="WARNING (-v) INFO (-vv), DEBUG (-vvv)"
    )
    parser.add_argument(
        "-o", "--output", default=None, help="File where relevant non-log output will be written to"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser(
        "show-defaults",
        help="See the default values for the mock server",
        description="These are the settings that 'run' will use unless overridden.",
    )

    run = sub.add_parser(
        "run",
        help="Serve the mock server",
        description="Serve with the optional settings file; the output file receives the address.",
    )
    run.add_argument("settings", nargs="?", default=None, help="YAML settings file")
    run.add_argument("-a", "--address", default=None, help="Overrides the host:port to serve on")
    return parser.parse_args(argv)


def _write_output(text: str, output: str | None) -> None:
    if output:
        path = Path(output)
        path.write_text(text)
        path.chmod(0o600)
    else:
        print(text)


def show_defaults(args: argparse.Namespace) -> int:
    _write_output(dump_settings(default_settings()), args.output)
    return 0


def run(args: argparse.Namespace, stdin=None) -> int:
    stdin = stdin or sys.stdin
    try:
        settings = load_settings(args.settings)
    except (OSError, ValueError) as e:
        logger.error("settings.invalid", extra={"path": args.settings, "error": str(e)})
        return 1
    if args.address:
        settings.address = args.address

    server = MockServer(settings)
    try:
        addr = server.serve()
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("serve.failed", extra={"error": str(e)})
        return 1

    try:
        if args.output:
            _write_output(addr, args.output)
        logger.info("serving", extra={"address": addr})
        print("Write 'exit' to stop serving")
        for line in stdin:
            if line.strip() == "exit":
                break
            print("Write 'exit' to stop serving")
    finally:
        server.stop()
        logger.info("stopped serving")
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    setup_logging(level_from_verbosity(args.verbosity))
    handler = show_defaults if args.command == "show-defaults" else run
    raise SystemExit(handler(args))


if __name__ == "__main__":
    main()
