"""Token configuration using pydantic-settings."""

import warnings
from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretBytes, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PLACEHOLDER_KEY = b"CHANGE-ME-IN-PRODUCTION"
_MIN_KEY_LENGTH = 32


class TokenConfig(BaseSettings):
    """Immutable token settings loaded from ``TOKENWARE_*`` environment variables.

    One instance is built at process start and passed explicitly into every
    codec, extractor and validator call. Being frozen, it can be shared by any
    number of concurrent callers without locking.
    """

    model_config = SettingsConfigDict(
        env_prefix="TOKENWARE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    environment: Literal["development", "staging", "production"] = "development"

    # Signing
    signing_key: SecretBytes = Field(
        default=SecretBytes(_PLACEHOLDER_KEY),
        description="HMAC signing secret. MUST be overridden in production.",
    )
    algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"
    time_to_live: timedelta = timedelta(hours=72)

    # Claims / transport
    identity_claim: str = "id"
    header: str = "Authorization"
    header_prefix: str = "Bearer "

    # Revocation store used by the CLI
    redis_url: str | None = None

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("time_to_live", mode="before")
    @classmethod
    def parse_seconds(cls, v: object) -> object:
        # Env values arrive as strings; a bare integer means seconds.
        if isinstance(v, str) and v.strip().isdigit():
            return timedelta(seconds=int(v))
        return v

    @field_validator("time_to_live")
    @classmethod
    def validate_time_to_live(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("time_to_live must be positive")
        return v

    @field_validator("identity_claim")
    @classmethod
    def validate_identity_claim(cls, v: str) -> str:
        if not v:
            raise ValueError("identity_claim must not be empty")
        if v == "exp":
            raise ValueError("identity_claim must not shadow the 'exp' claim")
        return v

    @field_validator("header")
    @classmethod
    def validate_header(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("header must not be empty")
        return v

    @model_validator(mode="after")
    def enforce_signing_key_strength(self) -> "TokenConfig":
        """Refuse weak keys outside development; only warn about them locally."""
        key = self.signing_key.get_secret_value()
        if self.environment == "development":
            if len(key) < _MIN_KEY_LENGTH:
                warnings.warn(
                    f"signing_key is shorter than {_MIN_KEY_LENGTH} bytes; "
                    "tokens signed with it are easy to forge",
                    UserWarning,
                    stacklevel=2,
                )
            return self

        if key == _PLACEHOLDER_KEY:
            raise ValueError(
                f"signing_key must be changed from its default value ({self.environment})"
            )
        if len(key) < _MIN_KEY_LENGTH:
            raise ValueError(
                f"signing_key must be at least {_MIN_KEY_LENGTH} bytes, got {len(key)}"
            )
        return self

    @property
    def key_bytes(self) -> bytes:
        """Raw signing key."""
        return self.signing_key.get_secret_value()


@lru_cache
def get_config() -> TokenConfig:
    """Get cached configuration instance."""
    return TokenConfig()
