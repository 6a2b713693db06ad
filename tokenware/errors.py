"""Exception taxonomy for token issuance and validation.

Every rejection of a presented credential derives from ``TokenError`` so a
hosting layer can map the whole family to a single unauthorized response.
``SigningError`` and ``RevocationStoreError`` are operational failures and
are deliberately kept outside that family.
"""


class TokenwareError(Exception):
    """Base class for all tokenware errors."""


class SigningError(TokenwareError):
    """Raised when the signing primitive cannot produce a token."""


class RevocationStoreError(TokenwareError):
    """Raised when the revocation lookup itself fails.

    A failing store is never interpreted as "not revoked".
    """


class TokenError(TokenwareError):
    """Raised when a presented token is rejected."""

    reason = "invalid_token"


class TokenNotFoundError(TokenError):
    """The configured header does not carry a prefixed token."""

    reason = "token_not_found"


class MalformedTokenError(TokenError):
    """The token string is not a well-formed signed token."""

    reason = "malformed"


class UnexpectedAlgorithmError(TokenError):
    """The token declares a signing algorithm outside the HMAC family."""

    reason = "unexpected_algorithm"

    def __init__(self, algorithm: object):
        self.algorithm = algorithm
        super().__init__(f"unexpected signing method: {algorithm!r}")


class InvalidSignatureError(TokenError):
    """The signature does not match the configured signing key."""

    reason = "invalid_signature"


class ExpiredTokenError(TokenError):
    """The token's ``exp`` claim is not in the future."""

    reason = "expired"

    def __init__(self, expired_at: float):
        self.expired_at = expired_at
        super().__init__(f"token expired at {expired_at}")


class RevokedTokenError(TokenError):
    """The token was revoked before its natural expiry."""

    reason = "revoked"

    def __init__(self) -> None:
        super().__init__("token has been revoked")
