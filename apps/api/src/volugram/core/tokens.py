"""
Single-Use Token Registry

In-memory store mapping unguessable tokens to a payload, used for account
activation and password reset links. Each registry is created once in the
application lifespan and handed to the services that need it.

Guarantees:
- Tokens carry 128 bits of randomness (secrets.token_urlsafe(16)) and are
  unique among the live keys of the registry
- redeem() is an atomic check-and-remove: of two concurrent redemptions of
  the same token exactly one observes the payload
- revoke_where() removes every entry whose payload matches a predicate
- An optional TTL makes old entries behave as absent; purge_expired()
  physically removes them (run by the scheduler)
"""

import logging
import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Generic, TypeVar

from fastapi import Request

logger = logging.getLogger(__name__)

T = TypeVar("T")

TOKEN_BYTES = 16  # 128 bits


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class TokenEntry(Generic[T]):
    """A live token and its payload."""

    token: str
    payload: T
    created_at: datetime
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class TokenRegistry(Generic[T]):
    """Thread-safe single-use token store."""

    def __init__(
        self,
        name: str,
        ttl: timedelta | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.name = name
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, TokenEntry[T]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for entry in self._entries.values() if not entry.is_expired(now))

    def __repr__(self) -> str:
        return f"TokenRegistry(name={self.name!r}, ttl={self.ttl})"

    def issue(self, payload: T) -> str:
        """
        Store a payload under a new unique token.

        Args:
            payload: Data handed back on redemption

        Returns:
            The token string (URL safe)
        """
        now = self._clock()
        expires_at = now + self.ttl if self.ttl is not None else None

        with self._lock:
            token = secrets.token_urlsafe(TOKEN_BYTES)
            while token in self._entries:
                token = secrets.token_urlsafe(TOKEN_BYTES)
            self._entries[token] = TokenEntry(
                token=token,
                payload=payload,
                created_at=now,
                expires_at=expires_at,
            )

        logger.debug(f"Issued {self.name} token")
        return token

    def peek(self, token: str) -> T | None:
        """Return the payload for a live token without consuming it."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(token)
            if entry is None or entry.is_expired(now):
                return None
            return entry.payload

    def redeem(self, token: str) -> T | None:
        """
        Consume a token.

        Returns:
            The payload if the token was live, otherwise None. The entry is
            removed in the same critical section as the read.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.pop(token, None)

        if entry is None:
            return None
        if entry.is_expired(now):
            logger.info(f"Rejected expired {self.name} token")
            return None

        logger.debug(f"Redeemed {self.name} token")
        return entry.payload

    def revoke_where(self, predicate: Callable[[T], bool]) -> int:
        """
        Remove every entry whose payload satisfies the predicate.

        Returns:
            Number of entries removed
        """
        with self._lock:
            doomed = [token for token, entry in self._entries.items() if predicate(entry.payload)]
            for token in doomed:
                del self._entries[token]

        if doomed:
            logger.info(f"Revoked {len(doomed)} {self.name} token(s)")
        return len(doomed)

    def purge_expired(self) -> int:
        """
        Physically drop expired entries.

        Returns:
            Number of entries removed (always 0 without a TTL)
        """
        if self.ttl is None:
            return 0

        now = self._clock()
        with self._lock:
            expired = [token for token, entry in self._entries.items() if entry.is_expired(now)]
            for token in expired:
                del self._entries[token]

        if expired:
            logger.info(f"Purged {len(expired)} expired {self.name} token(s)")
        return len(expired)


@dataclass(frozen=True)
class PendingRegistration:
    """Activation payload: an account waiting for its email to be confirmed."""

    name: str
    email: str
    password_hash: str


@dataclass
class TokenRegistries:
    """The two process-wide registries, attached to app.state at startup."""

    activation: TokenRegistry[PendingRegistration]
    password_reset: TokenRegistry[str]

    @classmethod
    def create(
        cls,
        activation_ttl: timedelta | None = None,
        password_reset_ttl: timedelta | None = None,
    ) -> "TokenRegistries":
        return cls(
            activation=TokenRegistry("activation", ttl=activation_ttl),
            password_reset=TokenRegistry("password_reset", ttl=password_reset_ttl),
        )

    def purge_expired(self) -> int:
        return self.activation.purge_expired() + self.password_reset.purge_expired()


def get_token_registries(request: Request) -> TokenRegistries:
    """
    FastAPI dependency returning the registries created in the lifespan.

    Usage:
        @router.post("/register")
        async def register(registries: TokenRegistries = Depends(get_token_registries)):
            ...
    """
    return request.app.state.token_registries
