#!/usr/bin/env python3
"""Smoke runner exercising both token exchanges against a backend.

Steps:
- fetch an access token
- exchange the user JWT for a Pro token, when one is given
- log obfuscated summaries and exit non-zero on the first failure
"""
from __future__ import annotations

import asyncio
import sys

import httpx

from contracts_client.cli import parse_args
from contracts_client.client import TokenClient
from contracts_client.logging_conf import get_logger, setup_logging
from contracts_client.types import ContractsError
from contracts_client.utils import summarize_token

logger = get_logger("contracts_client.smoke")


async def run_smoke(*, base_url: str, user_jwt: str | None, timeout_s: float = 10.0) -> int:
    async with httpx.AsyncClient(timeout=timeout_s) as http:
        client = TokenClient(base_url, http)
        summary: dict = {"component": "smoke", "event": "summary", "base_url": base_url}
        try:
            summary["access_token"] = summarize_token(await client.get_access_token())
            if user_jwt is not None:
                summary["pro_token"] = summarize_token(await client.exchange_user_token(user_jwt))
        except ContractsError as e:
            summary["error_code"] = e.code
            summary["error_message"] = str(e)
            logger.error("smoke.failed", extra=summary)
            return 1
    logger.info("smoke.summary", extra=summary)
    return 0


def main(argv: list[str] | None = None) -> None:
    setup_logging()
    args = parse_args(argv if argv is not None else sys.argv[1:])
    code = asyncio.run(run_smoke(base_url=args.base_url, user_jwt=args.jwt, timeout_s=args.timeout))
    raise SystemExit(code)


if __name__ == "__main__":
    main()
