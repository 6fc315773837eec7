"""User record store interface."""

from collections.abc import Callable
from typing import Protocol

from student_portal.domain.errors import (
    DuplicateIdentifierError,
    DuplicateStudentIdError,
)
from student_portal.domain.models import UserRecord

UserMutator = Callable[[UserRecord], UserRecord]


class UserRepository(Protocol):
    """Persistence interface for user records.

    Implementations must serialize writes so concurrent inserts and updates
    never lose one another's changes.
    """

    def find_by_identifier(self, identifier: str) -> UserRecord | None:
        """Return the first user whose username, email or student id matches."""

    def find_by_email(self, email: str) -> UserRecord | None:
        """Return the user registered with the email, if present."""

    def insert(self, record: UserRecord) -> UserRecord:
        """Insert a new record, enforcing identifier uniqueness."""

    def update(self, username: str, mutator: UserMutator) -> UserRecord:
        """Apply a mutation to the named user and persist it."""

    def count(self) -> int:
        """Return the number of stored users."""


def check_unique(existing: list[UserRecord], record: UserRecord) -> None:
    """Raise when the record collides with an existing one.

    Username and email share one check; student id is checked separately.
    """
    if any(
        user.username == record.username or user.email == record.email
        for user in existing
    ):
        raise DuplicateIdentifierError()
    if any(user.student_id == record.student_id for user in existing):
        raise DuplicateStudentIdError()
