"""Password hashing with bcrypt."""

import bcrypt

from core.config import settings

# bcrypt only looks at the first 72 bytes and newer releases reject longer input
_BCRYPT_MAX_BYTES = 72


class BcryptPasswordHasher:
    """One-way password hashing with a tunable work factor."""

    def __init__(self, rounds: int | None = None) -> None:
        self._rounds = rounds or settings.password_hash_rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(self._encode(password), password_hash.encode("utf-8"))
        except ValueError:
            return False

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
