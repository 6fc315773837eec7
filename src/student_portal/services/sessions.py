"""Login session lifecycle: creation, resolution, expiry and patching."""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from typing import Protocol

from student_portal.domain.models import PublicUserView
from student_portal.domain.sessions import SessionRecord

logger = logging.getLogger(__name__)

SnapshotMutator = Callable[[PublicUserView], PublicUserView]


class SessionRepository(Protocol):
    """Persistence interface for login sessions."""

    def save_session(self, session: SessionRecord) -> None:
        """Insert or replace a session keyed by its token."""

    def get_session(self, token: str) -> SessionRecord | None:
        """Return a session by token, if present."""

    def update_session(
        self, token: str, mutator: SnapshotMutator
    ) -> SessionRecord | None:
        """Patch the user snapshot of a session and return the result."""

    def delete_session(self, token: str) -> None:
        """Remove a session; unknown tokens are ignored."""

    def delete_expired(self, now: datetime) -> int:
        """Remove every session expired at `now` and return how many."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SessionService:
    """Issues opaque tokens with a fixed, non-sliding lifetime."""

    repository: SessionRepository
    ttl_seconds: int = 86400
    clock: Callable[[], datetime] = field(default=_utcnow)

    def create(self, user: PublicUserView) -> SessionRecord:
        """Create a session for the user snapshot."""
        now = self.clock()
        session = SessionRecord(
            token=secrets.token_urlsafe(32),
            user=user,
            created_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )
        self.repository.save_session(session)
        return session

    def resolve(self, token: str | None) -> PublicUserView | None:
        """Return the snapshot for a live session; expired sessions are dropped."""
        if not token:
            return None
        session = self.repository.get_session(token)
        if session is None:
            return None
        if session.is_expired(self.clock()):
            self.repository.delete_session(token)
            return None
        return session.user

    def touch(self, token: str, mutator: SnapshotMutator) -> PublicUserView | None:
        """Patch a live session's snapshot in place."""
        if self.resolve(token) is None:
            return None
        updated = self.repository.update_session(token, mutator)
        return updated.user if updated else None

    def destroy(self, token: str | None) -> None:
        """End a session. Unknown or empty tokens are a no-op."""
        if token:
            self.repository.delete_session(token)

    def reap_expired(self) -> int:
        """Delete all expired sessions."""
        removed = self.repository.delete_expired(self.clock())
        if removed:
            logger.info("Reaped expired sessions", extra={"count": removed})
        return removed


def with_photo(photo_ref: str) -> SnapshotMutator:
    """Return a snapshot mutator that swaps the photo reference."""

    def _mutate(user: PublicUserView) -> PublicUserView:
        return replace(user, photo_ref=photo_ref)

    return _mutate
