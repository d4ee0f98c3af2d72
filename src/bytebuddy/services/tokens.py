"""Signed session tokens."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SessionTokenSigner:
    """Issues and validates HS256 tokens identifying an account."""

    secret: str
    ttl_hours: int = 720
    algorithm: str = "HS256"
    clock: Callable[[], datetime] = field(default=_utc_now)

    def issue(self, account_id: str) -> str:
        """Return a signed token for the account."""
        now = self.clock()
        payload = {
            "sub": account_id,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=self.ttl_hours)).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str | None:
        """Return the account id when the token is valid and unexpired."""
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            _logger.warning("Rejected session token with invalid signature")
            return None
        expires_at = payload.get("exp")
        if not isinstance(expires_at, int | float):
            return None
        if self.clock().timestamp() >= expires_at:
            _logger.info("Session token expired")
            return None
        subject = payload.get("sub")
        return subject if isinstance(subject, str) else None
