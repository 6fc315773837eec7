"""JSON-file session repository."""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from student_portal.adapters.json_files import read_json, write_json_atomic
from student_portal.domain.errors import StorageError
from student_portal.domain.models import PublicUserView
from student_portal.domain.sessions import SessionRecord
from student_portal.services.sessions import SessionRepository, SnapshotMutator


@dataclass
class JsonSessionRepository(SessionRepository):
    """Persists sessions as a token-keyed JSON object so they survive restarts."""

    path: Path
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def save_session(self, session: SessionRecord) -> None:
        """Insert or replace a session."""
        with self._lock:
            rows = self._load()
            rows[session.token] = _to_row(session)
            write_json_atomic(self.path, rows)

    def get_session(self, token: str) -> SessionRecord | None:
        """Return a session by token, if present."""
        row = self._load().get(token)
        if not isinstance(row, dict):
            return None
        return _from_row(token, row)

    def update_session(
        self, token: str, mutator: SnapshotMutator
    ) -> SessionRecord | None:
        """Patch a session's user snapshot."""
        with self._lock:
            rows = self._load()
            row = rows.get(token)
            if not isinstance(row, dict):
                return None
            session = _from_row(token, row)
            updated = SessionRecord(
                token=token,
                user=mutator(session.user),
                created_at=session.created_at,
                expires_at=session.expires_at,
            )
            rows[token] = _to_row(updated)
            write_json_atomic(self.path, rows)
            return updated

    def delete_session(self, token: str) -> None:
        """Remove a session if present."""
        with self._lock:
            rows = self._load()
            if rows.pop(token, None) is not None:
                write_json_atomic(self.path, rows)

    def delete_expired(self, now: datetime) -> int:
        """Remove all sessions expired at `now`."""
        with self._lock:
            rows = self._load()
            expired = [
                token
                for token, row in rows.items()
                if not isinstance(row, dict) or _from_row(token, row).is_expired(now)
            ]
            for token in expired:
                del rows[token]
            if expired:
                write_json_atomic(self.path, rows)
            return len(expired)

    def _load(self) -> dict[str, object]:
        raw = read_json(self.path, default={})
        if not isinstance(raw, dict):
            raise StorageError()
        return raw


def _to_row(session: SessionRecord) -> dict[str, object]:
    user = session.user
    return {
        "user": {
            "username": user.username,
            "display_name": user.display_name,
            "email": user.email,
            "student_id": user.student_id,
            "photo_ref": user.photo_ref,
        },
        "created_at": session.created_at.isoformat(),
        "expires_at": session.expires_at.isoformat(),
    }


def _from_row(token: str, row: dict[str, object]) -> SessionRecord:
    try:
        user = row["user"]
        if not isinstance(user, dict):
            raise StorageError()
        return SessionRecord(
            token=token,
            user=PublicUserView(
                username=str(user["username"]),
                display_name=str(user["display_name"]),
                email=str(user["email"]),
                student_id=str(user["student_id"]),
                photo_ref=str(user["photo_ref"]),
            ),
            created_at=datetime.fromisoformat(str(row["created_at"])),
            expires_at=datetime.fromisoformat(str(row["expires_at"])),
        )
    except (KeyError, ValueError) as exc:
        raise StorageError() from exc
