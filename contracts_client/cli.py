from __future__ import annotations

import argparse

from contracts_client.config import (
    get_base_url_from_env,
    get_timeout_from_env,
    get_user_jwt_from_env,
)


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the token exchange smoke runner.

    Flags left out fall back to the environment; invalid environment values
    are reported as usage errors.
    """
    parser = argparse.ArgumentParser(description="Contracts Server token exchange smoke runner")
    parser.add_argument("--base-url", default=None, help="defaults to $CONTRACTS_BASE_URL")
    parser.add_argument("--jwt", default=None, help="user JWT to exchange; defaults to $USER_JWT")
    parser.add_argument("--timeout", type=float, default=None, help="defaults to $HTTP_TIMEOUT")
    args = parser.parse_args(argv)
    try:
        if args.base_url is None:
            args.base_url = get_base_url_from_env()
        if args.timeout is None:
            args.timeout = get_timeout_from_env()
    except ValueError as e:
        parser.error(str(e))
    if args.jwt is None:
        args.jwt = get_user_jwt_from_env()
    return args
