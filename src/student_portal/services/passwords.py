"""Password hashing with argon2."""

from dataclasses import dataclass, field
from typing import Protocol

from argon2 import PasswordHasher
from argon2.exceptions import HashingError as Argon2HashingError
from argon2.exceptions import InvalidHashError, VerificationError

from student_portal.domain.errors import HashingError


class CredentialHasher(Protocol):
    """Interface for slow, salted password hashing."""

    def hash(self, plaintext: str) -> str:
        """Return an encoded hash for the password."""

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return True when the password matches the encoded hash."""


@dataclass
class Argon2CredentialHasher(CredentialHasher):
    """argon2id hasher with a configurable work factor."""

    time_cost: int = 3
    memory_cost: int = 65536
    parallelism: int = 4
    _hasher: PasswordHasher = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._hasher = PasswordHasher(
            time_cost=self.time_cost,
            memory_cost=self.memory_cost,
            parallelism=self.parallelism,
        )

    def hash(self, plaintext: str) -> str:
        """Hash a password; raises HashingError on empty input or failure."""
        if not plaintext:
            raise HashingError("Password must not be empty")
        try:
            return self._hasher.hash(plaintext)
        except Argon2HashingError as exc:
            raise HashingError() from exc

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Verify a password against an encoded hash."""
        if not plaintext or not hashed:
            return False
        try:
            return self._hasher.verify(hashed, plaintext)
        except (VerificationError, InvalidHashError):
            return False
