"""Domain models for login sessions."""

from dataclasses import dataclass
from datetime import datetime

from student_portal.domain.models import PublicUserView


@dataclass(frozen=True)
class SessionRecord:
    """Represents a persisted login session."""

    token: str
    user: PublicUserView
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Return True once the session has reached its expiry time."""
        return now >= self.expires_at
