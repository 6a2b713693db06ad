"""Signed identity tokens for HTTP bearer authentication."""
from tokenware.auth import (
    InMemoryRevocationStore,
    RedisRevocationStore,
    decode_token,
    encode_token,
    extract_token,
    validate_from_header_value,
    validate_from_headers,
    validate_token,
)
from tokenware.config import TokenConfig, get_config
from tokenware.errors import (
    ExpiredTokenError,
    InvalidSignatureError,
    MalformedTokenError,
    RevocationStoreError,
    RevokedTokenError,
    SigningError,
    TokenError,
    TokenNotFoundError,
    TokenwareError,
    UnexpectedAlgorithmError,
)

__all__ = [
    "ExpiredTokenError",
    "InMemoryRevocationStore",
    "InvalidSignatureError",
    "MalformedTokenError",
    "RedisRevocationStore",
    "RevocationStoreError",
    "RevokedTokenError",
    "SigningError",
    "TokenConfig",
    "TokenError",
    "TokenNotFoundError",
    "TokenwareError",
    "UnexpectedAlgorithmError",
    "decode_token",
    "encode_token",
    "extract_token",
    "get_config",
    "validate_from_header_value",
    "validate_from_headers",
    "validate_token",
]
