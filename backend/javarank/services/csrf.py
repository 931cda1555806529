"""
CSRF token store.

Tokens are 256-bit random hex strings handed out by GET /api/csrf-token and
echoed back in the X-CSRF-Token header on mutating routes.

Semantics:
  • A token is valid from issuance until its TTL (1 hour) elapses.
  • Validation is a pure membership + expiry check — tokens are NOT
    single-use and NOT bound to a session. Any outstanding token passes.
  • Expired tokens are purged whenever a new token is issued, so the set
    only holds tokens issued within the last TTL.
"""

from __future__ import annotations

import secrets
import threading
import time
from collections.abc import Callable

DEFAULT_TTL_SECONDS = 3600.0


class CsrfTokenStore:
    """Process-local set of outstanding CSRF tokens with expiry."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._tokens: dict[str, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._tokens)

    def generate(self) -> str:
        """Issue a fresh token, valid for the configured TTL."""
        token = secrets.token_hex(32)  # 64 hex chars = 256 bits
        with self._lock:
            now = self._clock()
            self._purge_locked(now)
            self._tokens[token] = now + self._ttl
        return token

    def validate(self, token: str | None) -> bool:
        """True iff the token was issued here and has not expired."""
        if not token:
            return False
        expires_at = self._tokens.get(token)
        return expires_at is not None and self._clock() < expires_at

    def _purge_locked(self, now: float) -> None:
        expired = [t for t, exp in self._tokens.items() if now >= exp]
        for token in expired:
            del self._tokens[token]
