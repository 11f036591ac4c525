"""Password hashing helpers for portal accounts."""
from __future__ import annotations

from passlib.context import CryptContext

from .config import BCRYPT_ROUNDS


class PasswordHasher:
    """Salted bcrypt hashing with a fixed cost factor."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        if rounds < 4 or rounds > 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self._rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        """Return ``True`` when *password* matches *hashed*; malformed hashes never match."""

        if not hashed:
            return False
        try:
            return self._context.verify(password, hashed)
        except ValueError:
            return False


__all__ = ["PasswordHasher"]
