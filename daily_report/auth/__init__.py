"""
Authentication and Authorization module.

Provides:
- Session token issuance and verification (jwt)
- Password hashing with Argon2id (password)
- Authentication dependency and role/ownership guards (dependencies)

The dependencies module needs the service container and is imported
directly by the routers rather than re-exported here.
"""

from daily_report.auth.jwt import (
    Claim,
    TokenService,
)
from daily_report.auth.password import (
    hash_password,
    verify_password,
)

__all__ = [
    # JWT
    "Claim",
    "TokenService",
    # Password
    "hash_password",
    "verify_password",
]
