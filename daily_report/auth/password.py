"""
Password hashing with Argon2id.

Parameters: ~64 MB memory, 3 iterations, parallelism 4. Hashes embed
their own parameters and salt, so older hashes keep verifying after the
parameters change; needs_rehash() tells the login flow when to upgrade.
"""

import secrets
import string
from functools import lru_cache

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

ph = PasswordHasher(
    time_cost=3,        # Number of iterations
    memory_cost=65536,  # 64 MB memory usage
    parallelism=4,      # Number of parallel threads
    hash_len=32,        # Length of the hash in bytes
    salt_len=16,        # Length of the random salt
)


def hash_password(password: str) -> str:
    """Hash a password using Argon2id (salt included in the result)."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its hash.

    Returns False on mismatch and on a malformed stored hash.
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    try:
        return ph.check_needs_rehash(password_hash)
    except InvalidHashError:
        return True


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return ph.hash(secrets.token_urlsafe(16))


def burn_verification(password: str) -> None:
    """
    Spend the same work as a real verification.

    Called when the login email is unknown so response timing does not
    reveal whether an account exists.
    """
    verify_password(password, _dummy_hash())


def generate_temp_password(length: int = 16) -> str:
    """
    Generate a random temporary password (minimum 12 characters) with at
    least one upper, lower, digit and symbol character.
    """
    if length < 12:
        length = 12

    password = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
        secrets.choice("!@#$%^&*"),
    ]

    alphabet = string.ascii_letters + string.digits + "!@#$%^&*"
    password.extend(secrets.choice(alphabet) for _ in range(length - 4))

    secrets.SystemRandom().shuffle(password)

    return "".join(password)
