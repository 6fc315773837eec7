"""Profile reads and profile-photo replacement."""

import asyncio
import logging
import re
import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from pathlib import PurePath
from typing import Protocol

from student_portal.domain.errors import (
    InvalidFileError,
    NotFoundError,
    StorageError,
)
from student_portal.domain.models import DEFAULT_PHOTO_REF, PublicUserView, UserRecord
from student_portal.services.auth import AuthService
from student_portal.services.sessions import with_photo
from student_portal.services.users import UserRepository

logger = logging.getLogger(__name__)

ALLOWED_PHOTO_TYPES = frozenset({"image/jpeg", "image/png", "image/gif"})
MAX_PHOTO_BYTES = 5 * 1024 * 1024
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_MAX_NAME_LENGTH = 100


class PhotoStorage(Protocol):
    """Storage interface for photo assets."""

    def save(self, photo_ref: str, content: bytes) -> None:
        """Persist a new asset under the reference."""

    def delete(self, photo_ref: str) -> None:
        """Remove an asset; missing assets are ignored."""


@dataclass(frozen=True)
class PhotoUpdate:
    """Result of a successful photo replacement."""

    photo_ref: str
    photo_url: str


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ProfileService:
    """Authenticated profile reads and photo updates."""

    auth: AuthService
    users: UserRepository
    storage: PhotoStorage
    max_photo_bytes: int = MAX_PHOTO_BYTES
    url_prefix: str = "/uploads"
    clock: Callable[[], datetime] = field(default=_utcnow)
    _user_locks: dict[str, threading.Lock] = field(
        default_factory=dict, init=False, repr=False
    )
    _locks_guard: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    async def get_profile(self, token: str | None) -> PublicUserView:
        """Return the profile held by the caller's session."""
        return await self.auth.current_user(token)

    async def update_photo(
        self,
        token: str | None,
        content: bytes | None,
        content_type: str | None,
        filename: str | None,
    ) -> PhotoUpdate:
        """Replace the caller's photo and sync the new reference to the session."""
        user = await self.auth.current_user(token)
        if not content:
            raise InvalidFileError("No file uploaded")
        _validate_photo(content, content_type, self.max_photo_bytes)

        photo_ref = build_photo_ref(filename, self.clock())
        await asyncio.to_thread(self.storage.save, photo_ref, content)
        await asyncio.to_thread(self._replace_photo, user.username, token, photo_ref)
        logger.info(
            "Profile photo updated",
            extra={"username": user.username, "photo_ref": photo_ref},
        )
        return PhotoUpdate(photo_ref=photo_ref, photo_url=self.photo_url(photo_ref))

    def photo_url(self, photo_ref: str) -> str:
        """Return the public URL of a photo reference."""
        return f"{self.url_prefix}/{photo_ref}"

    def _replace_photo(self, username: str, token: str | None, photo_ref: str) -> None:
        # Record update, old-asset delete and session touch share one per-user lock.
        with self._lock_for(username):
            previous: list[str] = []

            def _swap(record: UserRecord) -> UserRecord:
                previous.append(record.photo_ref)
                return replace(record, photo_ref=photo_ref)

            try:
                self.users.update(username, _swap)
            except (NotFoundError, StorageError):
                self._discard(photo_ref)
                raise

            if previous and previous[0] not in {DEFAULT_PHOTO_REF, photo_ref}:
                self._discard(previous[0])
            if token:
                self.auth.sessions.touch(token, with_photo(photo_ref))

    def _lock_for(self, username: str) -> threading.Lock:
        with self._locks_guard:
            return self._user_locks.setdefault(username, threading.Lock())

    def _discard(self, photo_ref: str) -> None:
        try:
            self.storage.delete(photo_ref)
        except (StorageError, InvalidFileError):
            logger.warning(
                "Failed to delete photo asset", extra={"photo_ref": photo_ref}
            )


def build_photo_ref(filename: str | None, now: datetime) -> str:
    """Build a unique asset name from a timestamp and the sanitized filename."""
    name = PurePath((filename or "").replace("\\", "/")).name
    name = "".join(name.split())
    name = _UNSAFE_CHARS.sub("_", name).lstrip(".")[-_MAX_NAME_LENGTH:]
    millis = int(now.timestamp() * 1000)
    return f"{millis}-{secrets.token_hex(4)}-{name or 'photo'}"


def _validate_photo(content: bytes, content_type: str | None, max_bytes: int) -> None:
    declared = (content_type or "").split(";")[0].strip().lower()
    if declared not in ALLOWED_PHOTO_TYPES:
        raise InvalidFileError("Only JPEG, PNG and GIF images are allowed")
    if len(content) > max_bytes:
        raise InvalidFileError("File is too large")
