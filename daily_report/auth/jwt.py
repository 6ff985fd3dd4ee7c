"""
Session token service.

Tokens are HS256-signed JWTs carrying the identity claim
(sub = user id, email, role) plus iat/exp. Lifetime defaults to 24 hours.

The signing secret comes from Settings.jwt_secret. When it is left at the
development default every token is forgeable; the app logs a warning at
startup in that case.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict

from daily_report.models.user import Role


class Claim(BaseModel):
    """Identity derived from a verified token. Immutable for the request."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    email: str
    role: Role

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER


class TokenService:
    """Issues and verifies signed, expiring session tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_in: timedelta = timedelta(hours=24),
    ):
        self._secret = secret
        self.algorithm = algorithm
        self.expires_in = expires_in

    @property
    def expires_in_seconds(self) -> int:
        return int(self.expires_in.total_seconds())

    def issue(self, claim: Claim, now: Optional[datetime] = None) -> str:
        """
        Encode `claim` into a signed token.

        Args:
            claim: Identity to embed
            now: Issue time (defaults to the current UTC time)

        Returns:
            Encoded JWT string
        """
        issued_at = now or datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": str(claim.user_id),
            "email": claim.email,
            "role": claim.role.value,
            "iat": issued_at,
            "exp": issued_at + self.expires_in,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[Claim]:
        """
        Check signature and expiry and return the embedded claim.

        Never raises: any malformed, tampered, expired or incomplete token
        yields None.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
            return Claim(
                user_id=int(payload["sub"]),
                email=payload["email"],
                role=Role(payload["role"]),
            )
        except (JWTError, KeyError, TypeError, ValueError):
            return None
