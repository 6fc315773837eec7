"""Registration, sign-in, sign-out and password reset."""

import asyncio
import logging
from dataclasses import dataclass, field, replace

from student_portal.domain.errors import (
    InvalidCredentialsError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from student_portal.domain.models import DEFAULT_PHOTO_REF, PublicUserView, UserRecord
from student_portal.services.passwords import CredentialHasher
from student_portal.services.sessions import SessionService
from student_portal.services.users import UserRepository

logger = logging.getLogger(__name__)

_PASSWORD_MISMATCH = "Passwords do not match"


@dataclass(frozen=True)
class SignInResult:
    """Outcome of a successful sign-in."""

    token: str
    redirect_url: str
    user: PublicUserView


@dataclass(frozen=True)
class AdminAccount:
    """Account seeded into an empty store at startup."""

    username: str
    display_name: str
    student_id: str
    email: str
    password: str


@dataclass
class AuthService:
    """Stateless orchestration over the user store and the session store."""

    users: UserRepository
    sessions: SessionService
    hasher: CredentialHasher
    redirect_url: str = "/profile"
    _dummy_hash: str | None = field(default=None, init=False, repr=False)

    async def signup(  # noqa: PLR0913
        self,
        username: str,
        display_name: str,
        student_id: str,
        email: str,
        password: str,
        confirm_password: str | None = None,
    ) -> str:
        """Register a new user and return a confirmation message."""
        _require(username, display_name, student_id, email, password)
        if confirm_password is not None and confirm_password != password:
            raise ValidationError(_PASSWORD_MISMATCH)

        password_hash = await asyncio.to_thread(self.hasher.hash, password)
        record = UserRecord(
            username=username,
            display_name=display_name,
            student_id=student_id,
            email=email,
            password_hash=password_hash,
            photo_ref=DEFAULT_PHOTO_REF,
        )
        await asyncio.to_thread(self.users.insert, record)
        logger.info("User registered", extra={"username": username})
        return "User registered successfully"

    async def signin(
        self, identifier: str, password: str, previous_token: str | None = None
    ) -> SignInResult:
        """Verify credentials and open a session.

        A session the caller already held is destroyed once the new one exists.
        """
        _require(identifier, password)
        user = await asyncio.to_thread(self.users.find_by_identifier, identifier)
        if user is None:
            await asyncio.to_thread(self._verify_dummy, password)
            logger.info("Sign-in rejected")
            raise InvalidCredentialsError()
        if not await asyncio.to_thread(
            self.hasher.verify, password, user.password_hash
        ):
            logger.info("Sign-in rejected")
            raise InvalidCredentialsError()

        session = await asyncio.to_thread(self.sessions.create, user.public_view())
        if previous_token and previous_token != session.token:
            await asyncio.to_thread(self.sessions.destroy, previous_token)
        logger.info("Sign-in succeeded", extra={"username": user.username})
        return SignInResult(
            token=session.token,
            redirect_url=self.redirect_url,
            user=session.user,
        )

    async def signout(self, token: str | None) -> None:
        """Destroy the session, whether or not it is still valid."""
        await asyncio.to_thread(self.sessions.destroy, token)

    async def reset_password(
        self,
        email: str,
        new_password: str,
        confirm_new_password: str | None = None,
    ) -> str:
        """Overwrite the password hash of the user registered with the email.

        No proof of email ownership is required and existing sessions for
        the user stay valid.
        """
        _require(email, new_password)
        if confirm_new_password is not None and confirm_new_password != new_password:
            raise ValidationError(_PASSWORD_MISMATCH)
        user = await asyncio.to_thread(self.users.find_by_email, email)
        if user is None:
            raise NotFoundError()

        password_hash = await asyncio.to_thread(self.hasher.hash, new_password)
        await asyncio.to_thread(
            self.users.update,
            user.username,
            lambda record: replace(record, password_hash=password_hash),
        )
        logger.info("Password reset", extra={"username": user.username})
        return "Password reset successful"

    async def current_user(self, token: str | None) -> PublicUserView:
        """Return the session snapshot or raise UnauthenticatedError."""
        user = await asyncio.to_thread(self.sessions.resolve, token)
        if user is None:
            raise UnauthenticatedError()
        return user

    async def ensure_default_admin(self, account: AdminAccount) -> bool:
        """Seed the admin account when the store is empty."""
        if await asyncio.to_thread(self.users.count):
            return False
        password_hash = await asyncio.to_thread(self.hasher.hash, account.password)
        record = UserRecord(
            username=account.username,
            display_name=account.display_name,
            student_id=account.student_id,
            email=account.email,
            password_hash=password_hash,
        )
        await asyncio.to_thread(self.users.insert, record)
        logger.info(
            "Created default admin user", extra={"username": account.username}
        )
        return True

    def _verify_dummy(self, password: str) -> bool:
        # Unknown identifiers pay the same verify cost as wrong passwords.
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash("not-a-real-password")
        return self.hasher.verify(password, self._dummy_hash)


def _require(*values: str | None) -> None:
    if any(value is None or not str(value).strip() for value in values):
        raise ValidationError()
