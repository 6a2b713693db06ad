"""Command-line token issuance, verification and revocation.

Configuration comes from ``TOKENWARE_*`` environment variables::

    TOKENWARE_SIGNING_KEY=... python -m tokenware issue '{"user_id": 42}'
    TOKENWARE_SIGNING_KEY=... python -m tokenware verify eyJhbGciOi...
    TOKENWARE_REDIS_URL=redis://localhost:6379/0 python -m tokenware revoke eyJhbGciOi...
"""

import argparse
import json
import logging
import sys
from typing import Any

from tokenware.auth.codec import encode_token
from tokenware.auth.revocation import RedisRevocationStore, RevocationCheck
from tokenware.auth.validator import validate_token
from tokenware.config import TokenConfig, get_config
from tokenware.errors import RevocationStoreError, SigningError, TokenError
from tokenware.utils.logging import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_UNAVAILABLE = 2


def _parse_identity(raw: str) -> Any:
    """Interpret *raw* as JSON, falling back to the plain string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _not_revoked(token: str) -> bool:
    return False


def cmd_issue(args: argparse.Namespace, config: TokenConfig) -> int:
    try:
        token = encode_token(_parse_identity(args.identity), config)
    except SigningError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_REJECTED
    print(token)
    return EXIT_OK


def cmd_verify(args: argparse.Namespace, config: TokenConfig) -> int:
    revocation_check: RevocationCheck
    if config.redis_url:
        revocation_check = RedisRevocationStore.from_url(config.redis_url)
    else:
        logger.warning("TOKENWARE_REDIS_URL not set; revocation is not checked")
        revocation_check = _not_revoked

    try:
        identity = validate_token(args.token, config, revocation_check)
    except TokenError as exc:
        print(f"rejected ({exc.reason}): {exc}", file=sys.stderr)
        return EXIT_REJECTED
    except RevocationStoreError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_UNAVAILABLE
    print(json.dumps(identity))
    return EXIT_OK


def cmd_revoke(args: argparse.Namespace, config: TokenConfig) -> int:
    if not config.redis_url:
        print("error: TOKENWARE_REDIS_URL is required to revoke tokens", file=sys.stderr)
        return EXIT_UNAVAILABLE

    store = RedisRevocationStore.from_url(config.redis_url)
    try:
        stored = store.revoke(args.token)
    except TokenError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_REJECTED
    if stored:
        print("revoked")
    else:
        print("token already expired; nothing to revoke")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tokenware", description="Issue and validate signed identity tokens")
    subparsers = parser.add_subparsers(dest="command", required=True)

    issue = subparsers.add_parser("issue", help="Issue a token for an identity")
    issue.add_argument("identity", help="Identity as JSON (plain strings are accepted as-is)")
    issue.set_defaults(handler=cmd_issue)

    verify = subparsers.add_parser("verify", help="Validate a token and print its identity")
    verify.add_argument("token")
    verify.set_defaults(handler=cmd_verify)

    revoke = subparsers.add_parser("revoke", help="Revoke a token until it expires")
    revoke.add_argument("token")
    revoke.set_defaults(handler=cmd_revoke)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    setup_logging(config.log_level, config.log_format)
    return args.handler(args, config)
