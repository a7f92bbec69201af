"""
Credential primitives - password hashing and token generation.

All helpers are stateless and safe to call from concurrent requests.
"""

import secrets
import uuid
from dataclasses import dataclass

import bcrypt

DEFAULT_BCRYPT_COST = 12


@dataclass(frozen=True)
class PasswordHasher:
    """bcrypt hashing with a fixed work factor."""

    rounds: int = DEFAULT_BCRYPT_COST

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, digest: str) -> bool:
        """
        Check a plaintext password against a stored digest.

        Never raises on mismatch. A malformed digest or a password bcrypt
        refuses (over 72 bytes) counts as a mismatch.
        """
        try:
            return bcrypt.checkpw(password.encode(), digest.encode())
        except ValueError:
            return False


def generate_token(nbytes: int = 32) -> str:
    """Cryptographically secure opaque token, hex encoded."""
    return secrets.token_hex(nbytes)


def new_id() -> str:
    return str(uuid.uuid4())
