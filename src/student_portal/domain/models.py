"""Domain models for user accounts."""

from dataclasses import dataclass

DEFAULT_PHOTO_REF = "default-avatar.png"


@dataclass(frozen=True)
class PublicUserView:
    """User fields that are safe to expose to clients."""

    username: str
    display_name: str
    email: str
    student_id: str
    photo_ref: str


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the record store."""

    username: str
    display_name: str
    student_id: str
    email: str
    password_hash: str
    photo_ref: str = DEFAULT_PHOTO_REF

    def matches(self, identifier: str) -> bool:
        """Return True when the identifier is this user's username, email or id."""
        return identifier in {self.username, self.email, self.student_id}

    def public_view(self) -> PublicUserView:
        """Return the public subset of the record."""
        return PublicUserView(
            username=self.username,
            display_name=self.display_name,
            email=self.email,
            student_id=self.student_id,
            photo_ref=self.photo_ref,
        )
