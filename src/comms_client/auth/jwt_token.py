"""
Short-lived application JWTs.

Tokens are RS256-signed with the application's private key and carry the
``application_id``, ``iat``, ``exp`` and ``jti`` claims.
"""
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import jwt

logger = logging.getLogger(__name__)

DEFAULT_TTL = 900
# A cached token is replaced once it is this close to expiry
DEFAULT_REFRESH_MARGIN = 30
ALGORITHM = "RS256"


def load_private_key(value: Union[str, bytes, Path]) -> bytes:
    """Accept PEM text/bytes or a path to a PEM file."""
    if isinstance(value, Path):
        return value.read_bytes()
    if isinstance(value, str):
        if "-----BEGIN" in value:
            return value.encode("utf-8")
        return Path(value).read_bytes()
    return bytes(value)


def mint_token(
    application_id: str,
    private_key: Union[str, bytes],
    ttl: int = DEFAULT_TTL,
    claims: Optional[Mapping[str, Any]] = None,
    now: Optional[float] = None,
) -> str:
    """Generate an RS256 application token."""
    iat = int(time.time() if now is None else now)
    payload: Dict[str, Any] = dict(claims or {})
    payload.update({
        "application_id": application_id,
        "iat": iat,
        "exp": iat + ttl,
        "jti": str(uuid.uuid4()),
    })
    # PyJWT returns str in v2+
    return jwt.encode(payload, private_key, algorithm=ALGORITHM)


@dataclass(frozen=True)
class MintedToken:
    token: str
    expires_at: float


class TokenCache:
    """
    Compute-or-reuse holder for one minted token.

    ``get`` returns the cached token while it is outside the refresh margin and
    mints a replacement otherwise. Minting runs under a lock so concurrent
    callers never observe a partially built token and mint at most once per
    expiry.
    """

    def __init__(
        self,
        application_id: str,
        private_key: Union[str, bytes],
        ttl: int = DEFAULT_TTL,
        refresh_margin: int = DEFAULT_REFRESH_MARGIN,
        claims: Optional[Mapping[str, Any]] = None,
    ):
        if ttl <= refresh_margin:
            raise ValueError(f"ttl ({ttl}) must exceed refresh_margin ({refresh_margin})")
        self._application_id = application_id
        self._private_key = private_key
        self._ttl = ttl
        self._refresh_margin = refresh_margin
        self._claims = dict(claims or {})
        self._lock = threading.Lock()
        self._current: Optional[MintedToken] = None
        self.mint_count = 0

    def _fresh(self, minted: Optional[MintedToken], now: float) -> bool:
        return minted is not None and now < minted.expires_at - self._refresh_margin

    def get(self, now: Optional[float] = None) -> str:
        now = time.time() if now is None else now
        current = self._current
        if self._fresh(current, now):
            return current.token

        with self._lock:
            current = self._current
            if self._fresh(current, now):
                return current.token
            token = mint_token(self._application_id, self._private_key, self._ttl, self._claims, now)
            self._current = MintedToken(token=token, expires_at=int(now) + self._ttl)
            self.mint_count += 1
            logger.debug(
                f"TokenCache.get: minted token for application_id={self._application_id}, "
                f"expires_at={self._current.expires_at}"
            )
            return token
