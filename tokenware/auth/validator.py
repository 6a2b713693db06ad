"""Token validation: revocation lookup, verification, identity extraction."""

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from tokenware.auth.codec import decode_token
from tokenware.auth.extractor import extract_from_headers, extract_token
from tokenware.auth.revocation import RevocationCheck, token_fingerprint
from tokenware.config import TokenConfig
from tokenware.errors import MalformedTokenError, RevocationStoreError, RevokedTokenError, TokenError

logger = logging.getLogger(__name__)


def validate_token(
    token: str,
    config: TokenConfig,
    revocation_check: RevocationCheck,
    *,
    identity_type: Any = None,
    now: datetime | None = None,
) -> Any:
    """Validate *token* and return the identity it carries.

    The revocation check runs first so a revoked token is refused without any
    cryptographic work. A failing check raises ``RevocationStoreError``; it is
    never read as "not revoked".

    A token without the identity claim yields ``None``. When *identity_type*
    is given, the identity is validated into that type with pydantic.
    """
    fingerprint = token_fingerprint(token) if isinstance(token, str) else None

    try:
        revoked = revocation_check(token)
    except Exception as exc:
        logger.error("Revocation lookup failed for token %s", fingerprint, exc_info=True)
        raise RevocationStoreError(f"revocation lookup failed: {exc}") from exc

    if revoked:
        logger.info("Rejected token %s: %s", fingerprint, RevokedTokenError.reason)
        raise RevokedTokenError()

    try:
        claims = decode_token(token, config, now=now)
    except TokenError as exc:
        logger.info("Rejected token %s: %s", fingerprint, exc.reason)
        raise

    if config.identity_claim not in claims:
        logger.warning("Token %s carries no %r claim", fingerprint, config.identity_claim)
    identity = claims.get(config.identity_claim)

    if identity_type is None:
        return identity
    try:
        return TypeAdapter(identity_type).validate_python(identity)
    except ValidationError as exc:
        logger.info("Rejected token %s: identity does not match %r", fingerprint, identity_type)
        raise MalformedTokenError(f"identity claim is not a valid {identity_type!r}") from exc


def validate_from_header_value(
    header_value: str | None,
    config: TokenConfig,
    revocation_check: RevocationCheck,
    **kwargs: Any,
) -> Any:
    """Extract the bearer token from a raw header value and validate it."""
    token = extract_token(header_value, config)
    return validate_token(token, config, revocation_check, **kwargs)


def validate_from_headers(
    headers: Mapping[str, str],
    config: TokenConfig,
    revocation_check: RevocationCheck,
    **kwargs: Any,
) -> Any:
    """Read the configured header from *headers* and validate its token."""
    token = extract_from_headers(headers, config)
    return validate_token(token, config, revocation_check, **kwargs)
