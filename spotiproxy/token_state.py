"""Process-wide OAuth token pair shared by every request."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import RLock
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class TokenPair:
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    # Epoch seconds; None when the upstream did not say
    expires_at: Optional[float] = None

    @classmethod
    def from_token_response(
        cls,
        body: Mapping[str, Any],
        *,
        fallback_refresh_token: Optional[str] = None,
        now: Optional[float] = None,
    ) -> "TokenPair":
        """Build a pair from an accounts-service token response body."""
        expires_in = body.get("expires_in")
        expires_at = None
        if isinstance(expires_in, (int, float)) and not isinstance(expires_in, bool):
            expires_at = (time.time() if now is None else now) + float(expires_in)
        return cls(
            access_token=body.get("access_token"),
            refresh_token=body.get("refresh_token") or fallback_refresh_token,
            expires_at=expires_at,
        )

    @property
    def is_empty(self) -> bool:
        return not self.access_token and not self.refresh_token

    def is_stale(self, leeway: float = 0.0, now: Optional[float] = None) -> bool:
        if not self.access_token or self.expires_at is None:
            return True
        current = time.time() if now is None else now
        return self.expires_at - leeway <= current


class TokenStore:
    """Thread-safe holder for the current :class:`TokenPair`.

    Readers always get a whole pair; access and refresh tokens are never
    observed from different updates.
    """

    def __init__(self, initial: Optional[TokenPair] = None) -> None:
        self._pair = initial or TokenPair()
        self._lock = RLock()

    def get(self) -> TokenPair:
        with self._lock:
            return self._pair

    def set(self, pair: TokenPair) -> None:
        with self._lock:
            self._pair = pair

    def clear(self) -> None:
        with self._lock:
            self._pair = TokenPair()

    def compare_and_set(self, expected: TokenPair, new: TokenPair) -> bool:
        """Replace the pair only if it is still ``expected``."""
        with self._lock:
            if self._pair is not expected:
                return False
            self._pair = new
            return True


__all__ = ["TokenPair", "TokenStore"]
