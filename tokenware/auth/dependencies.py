"""FastAPI dependency for bearer-token authentication.

Usage::

    auth = TokenAuth(get_config(), RedisRevocationStore.from_url(url))

    @app.get("/me")
    def me(identity: Annotated[dict, Depends(auth)]):
        return identity
"""

from typing import Any

from fastapi import HTTPException, Request, status

from tokenware.auth.revocation import RevocationCheck
from tokenware.auth.validator import validate_from_headers
from tokenware.config import TokenConfig
from tokenware.errors import RevocationStoreError, TokenError
from tokenware.utils.logging import get_logger

logger = get_logger(__name__)


class TokenAuth:
    """Resolve the caller's identity from the configured request header.

    ``__call__`` is synchronous on purpose: FastAPI runs it in its thread
    pool, so a blocking revocation lookup never stalls the event loop.
    Rejection details are logged but never sent to the client.
    """

    def __init__(
        self,
        config: TokenConfig,
        revocation_check: RevocationCheck,
        identity_type: Any = None,
    ):
        self.config = config
        self.revocation_check = revocation_check
        self.identity_type = identity_type

    def __call__(self, request: Request) -> Any:
        try:
            return validate_from_headers(
                request.headers,
                self.config,
                self.revocation_check,
                identity_type=self.identity_type,
            )
        except TokenError as exc:
            logger.info("auth_rejected", reason=exc.reason, path=request.url.path)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
                headers={"WWW-Authenticate": "Bearer"},
            ) from exc
        except RevocationStoreError as exc:
            logger.error("auth_unavailable", path=request.url.path)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication temporarily unavailable",
            ) from exc
