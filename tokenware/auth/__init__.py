"""Token issuance, extraction and validation."""
from tokenware.auth.codec import decode_token, encode_token, get_unverified_claims
from tokenware.auth.extractor import extract_from_headers, extract_token
from tokenware.auth.revocation import (
    InMemoryRevocationStore,
    RedisRevocationStore,
    RevocationCheck,
    token_fingerprint,
)
from tokenware.auth.validator import validate_from_header_value, validate_from_headers, validate_token

__all__ = [
    "InMemoryRevocationStore",
    "RedisRevocationStore",
    "RevocationCheck",
    "decode_token",
    "encode_token",
    "extract_from_headers",
    "extract_token",
    "get_unverified_claims",
    "token_fingerprint",
    "validate_from_header_value",
    "validate_from_headers",
    "validate_token",
]
