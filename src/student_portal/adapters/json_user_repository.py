"""JSON-file user repository guarded by a single writer lock."""

import logging
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path

from student_portal.adapters.json_files import read_json, write_json_atomic
from student_portal.domain.errors import NotFoundError, StorageError
from student_portal.domain.models import DEFAULT_PHOTO_REF, UserRecord
from student_portal.services.users import UserMutator, UserRepository, check_unique

logger = logging.getLogger(__name__)


@dataclass
class JsonUserRepository(UserRepository):
    """Stores all users as one ordered JSON array.

    Every write loads the whole array, mutates it and rewrites it while
    holding `_lock`, so concurrent writers are serialized.
    """

    path: Path
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def find_by_identifier(self, identifier: str) -> UserRecord | None:
        """Return the first user whose username, email or student id matches."""
        if not identifier:
            return None
        return next(
            (user for user in self._load() if user.matches(identifier)), None
        )

    def find_by_email(self, email: str) -> UserRecord | None:
        """Return the user registered with the email, if present."""
        if not email:
            return None
        return next((user for user in self._load() if user.email == email), None)

    def insert(self, record: UserRecord) -> UserRecord:
        """Append a new user after checking uniqueness under the lock."""
        with self._lock:
            users = self._load()
            check_unique(users, record)
            users.append(record)
            self._save(users)
        return record

    def update(self, username: str, mutator: UserMutator) -> UserRecord:
        """Apply the mutator to the named user and persist the result."""
        with self._lock:
            users = self._load()
            for index, user in enumerate(users):
                if user.username == username:
                    updated = replace(mutator(user), username=user.username)
                    users[index] = updated
                    self._save(users)
                    return updated
        raise NotFoundError()

    def count(self) -> int:
        """Return the number of stored users."""
        return len(self._load())

    def _load(self) -> list[UserRecord]:
        raw = read_json(self.path, default=[])
        if not isinstance(raw, list):
            logger.error("User store is not a JSON array")
            raise StorageError()
        if not all(isinstance(row, dict) for row in raw):
            logger.error("User store holds a row that is not an object")
            raise StorageError()
        return [_from_row(row) for row in raw]

    def _save(self, users: list[UserRecord]) -> None:
        write_json_atomic(self.path, [_to_row(user) for user in users])


def _to_row(user: UserRecord) -> dict[str, str]:
    return {
        "username": user.username,
        "display_name": user.display_name,
        "student_id": user.student_id,
        "email": user.email,
        "password_hash": user.password_hash,
        "photo_ref": user.photo_ref,
    }


def _from_row(row: dict[str, object]) -> UserRecord:
    try:
        return UserRecord(
            username=str(row["username"]),
            display_name=str(row.get("display_name") or ""),
            student_id=str(row["student_id"]),
            email=str(row["email"]),
            password_hash=str(row["password_hash"]),
            photo_ref=str(row.get("photo_ref") or DEFAULT_PHOTO_REF),
        )
    except KeyError as exc:
        logger.error("User row is missing a field", extra={"field": str(exc)})
        raise StorageError() from exc
