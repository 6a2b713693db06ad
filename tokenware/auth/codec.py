"""Signed identity token encoding and decoding.

Tokens are compact JWS strings (``header.payload.signature``) signed with an
HMAC variant, so any standards-compliant JWT library holding the same key
can verify them and vice versa.

Decoding checks structure, then the algorithm family, then the signature and
expiry. The verification key always comes from the configuration; the
token's ``alg`` header only picks the HMAC hash and is rejected outright
when it names anything outside the HMAC family.
"""

import json
import logging
import math
from datetime import UTC, datetime
from typing import Any

from jose import jwk, jws, jwt
from jose.constants import ALGORITHMS
from jose.exceptions import JOSEError, JWKError, JWSError, JWTError
from pydantic import BaseModel

from tokenware.config import TokenConfig
from tokenware.errors import (
    ExpiredTokenError,
    InvalidSignatureError,
    MalformedTokenError,
    SigningError,
    UnexpectedAlgorithmError,
)

logger = logging.getLogger(__name__)

HMAC_ALGORITHMS = frozenset(ALGORITHMS.HMAC)


def encode_token(identity: Any, config: TokenConfig, *, now: datetime | None = None) -> str:
    """Create and sign a token carrying *identity* and an ``exp`` claim.

    Args:
        identity: Any JSON-compatible value. Pydantic models are dumped in
            JSON mode first.
        config: Signing key, algorithm, identity claim name and time-to-live.
        now: Timezone-aware issuance time; defaults to the current UTC time.

    Raises:
        SigningError: The key is unusable or the identity cannot be serialised.
    """
    if isinstance(identity, BaseModel):
        identity = identity.model_dump(mode="json")

    issued_at = now or datetime.now(UTC)
    expires_at = int((issued_at + config.time_to_live).timestamp())
    claims = {config.identity_claim: identity, "exp": expires_at}

    try:
        token = jwt.encode(claims, config.key_bytes, algorithm=config.algorithm)
    except (JOSEError, TypeError, ValueError) as exc:
        raise SigningError(f"error signing token: {exc}") from exc

    logger.debug("Issued %s token expiring at %d", config.algorithm, expires_at)
    return token


def decode_token(token: str, config: TokenConfig, *, now: datetime | None = None) -> dict[str, Any]:
    """Verify *token* and return its full claims mapping.

    An expired token is reported as expired whether or not its signature
    verifies; every other rejection follows the order listed below.

    Raises:
        MalformedTokenError: Not three base64url segments with a JSON header
            and a JSON object payload carrying a numeric ``exp``.
        UnexpectedAlgorithmError: ``alg`` is missing or not HS256/HS384/HS512.
        InvalidSignatureError: The HMAC does not match the configured key.
        ExpiredTokenError: The current time is at or past ``exp``.
        SigningError: The configured key cannot be used for HMAC.
    """
    if not isinstance(token, str) or token.count(".") != 2:
        raise MalformedTokenError("token must consist of three dot-separated segments")

    try:
        header = jws.get_unverified_header(token)
        payload = jws.get_unverified_claims(token)
    except JWSError as exc:
        raise MalformedTokenError(f"could not parse token: {exc}") from exc

    try:
        claims = json.loads(payload)
    except ValueError as exc:
        raise MalformedTokenError("token payload is not valid JSON") from exc
    if not isinstance(claims, dict):
        raise MalformedTokenError("token payload must be a JSON object")

    algorithm = header.get("alg")
    if not isinstance(algorithm, str) or algorithm not in HMAC_ALGORITHMS:
        raise UnexpectedAlgorithmError(algorithm)

    exp = claims.get("exp")
    # bool is an int subclass; true/false is never a timestamp
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise MalformedTokenError("token has no numeric 'exp' claim")
    if isinstance(exp, float) and not math.isfinite(exp):
        raise MalformedTokenError("token 'exp' claim is not a finite timestamp")

    expired = (now or datetime.now(UTC)).timestamp() >= exp

    key = _verification_key(config, algorithm)
    try:
        jws.verify(token, key, algorithms=[algorithm])
    except JWSError as exc:
        if expired:
            raise ExpiredTokenError(exp) from exc
        raise InvalidSignatureError("signature verification failed") from exc

    if expired:
        raise ExpiredTokenError(exp)

    return claims


def get_unverified_claims(token: str) -> dict[str, Any]:
    """Return the claims of *token* WITHOUT verifying it.

    Only for bookkeeping such as revocation TTLs; never for authentication.
    """
    if not isinstance(token, str):
        raise MalformedTokenError("token must be a string")
    try:
        return dict(jwt.get_unverified_claims(token))
    except JWTError as exc:
        raise MalformedTokenError(f"could not parse token claims: {exc}") from exc


def _verification_key(config: TokenConfig, algorithm: str) -> jwk.Key:
    try:
        return jwk.construct(config.key_bytes, algorithm)
    except JWKError as exc:
        raise SigningError(f"signing key cannot be used with {algorithm}: {exc}") from exc
