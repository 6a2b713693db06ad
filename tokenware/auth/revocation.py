"""Token deny-lists.

Allows individual tokens to be revoked before their natural expiry. Entries
are keyed on the SHA-256 digest of the raw token string and expire together
with the token, so a store never grows past the set of live tokens.

Any ``Callable[[str], bool]`` can serve as a revocation check; both stores
here are callable. Usage::

    store = RedisRevocationStore.from_url("redis://localhost:6379/0")
    store.revoke(token)
    validate_token(token, config, store)
"""

import hashlib
import math
import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime

from redis import Redis

from tokenware.auth.codec import get_unverified_claims
from tokenware.errors import MalformedTokenError

RevocationCheck = Callable[[str], bool]


def token_fingerprint(token: str) -> str:
    """Stable, non-reversible identifier for *token* (store key and log field)."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def remaining_lifetime(token: str, *, now: datetime | None = None) -> int:
    """Seconds until *token* expires, rounded up; 0 if expired or without ``exp``.

    Raises ``MalformedTokenError`` when ``exp`` is not a finite timestamp.
    """
    exp = get_unverified_claims(token).get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return 0
    current = (now or datetime.now(UTC)).timestamp()
    try:
        remaining = math.ceil(exp - current)
    except (OverflowError, ValueError) as exc:
        raise MalformedTokenError("token 'exp' claim is not a finite timestamp") from exc
    return max(0, remaining)


class InMemoryRevocationStore:
    """Process-local deny-list.

    Safe for concurrent use from multiple threads. Expired entries are dropped
    lazily on lookup and on every write.
    """

    def __init__(self) -> None:
        self._entries: dict[str, float] = {}
        self._lock = threading.Lock()

    def revoke(self, token: str, expires_in_seconds: int | None = None) -> bool:
        """Deny *token* until it expires, or for *expires_in_seconds* if given.

        Returns ``False`` without storing anything when the entry would already
        be dead, e.g. for a token past its ``exp``.
        """
        ttl = remaining_lifetime(token) if expires_in_seconds is None else expires_in_seconds
        with self._lock:
            self._gc()
            if ttl <= 0:
                return False
            self._entries[token_fingerprint(token)] = time.monotonic() + ttl
        return True

    def is_revoked(self, token: str) -> bool:
        key = token_fingerprint(token)
        with self._lock:
            if key not in self._entries:
                return False
            deadline = self._entries[key]
            if deadline <= time.monotonic():
                del self._entries[key]
                return False
            return True

    def __call__(self, token: str) -> bool:
        return self.is_revoked(token)

    def __len__(self) -> int:
        with self._lock:
            self._gc()
            return len(self._entries)

    def _gc(self) -> None:
        now = time.monotonic()
        expired = [k for k, v in self._entries.items() if v <= now]
        for k in expired:
            del self._entries[k]


class RedisRevocationStore:
    """Redis-backed deny-list.

    Uses a synchronous client: lookups block the caller, and connection or
    timeout errors propagate unchanged so validation fails closed.
    """

    DEFAULT_PREFIX = "token:deny:"

    def __init__(self, redis: Redis, prefix: str = DEFAULT_PREFIX):
        self.redis = redis
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = DEFAULT_PREFIX) -> "RedisRevocationStore":
        return cls(Redis.from_url(url, decode_responses=True), prefix=prefix)

    def _make_key(self, token: str) -> str:
        return f"{self.prefix}{token_fingerprint(token)}"

    def revoke(self, token: str, expires_in_seconds: int | None = None) -> bool:
        """Add *token* to the deny-list with a TTL equal to its remaining lifetime.

        Returns ``False`` without writing when the token has already expired,
        since expiry alone rejects it from then on.
        """
        ttl = remaining_lifetime(token) if expires_in_seconds is None else expires_in_seconds
        if ttl <= 0:
            return False
        self.redis.setex(self._make_key(token), ttl, "1")
        return True

    def is_revoked(self, token: str) -> bool:
        """Return ``True`` if *token* has been revoked."""
        return self.redis.exists(self._make_key(token)) > 0

    def __call__(self, token: str) -> bool:
        return self.is_revoked(token)
