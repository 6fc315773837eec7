"""Shared test fixtures."""

import threading
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from student_portal.api.app import create_app
from student_portal.config import Settings
from student_portal.containers import AppContainer, build_container
from student_portal.domain.errors import NotFoundError, StorageError
from student_portal.domain.models import UserRecord
from student_portal.domain.sessions import SessionRecord
from student_portal.services.auth import AuthService
from student_portal.services.passwords import CredentialHasher
from student_portal.services.profile import PhotoStorage, ProfileService
from student_portal.services.sessions import (
    SessionRepository,
    SessionService,
    SnapshotMutator,
)
from student_portal.services.users import UserMutator, UserRepository, check_unique

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: list[UserRecord] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    def find_by_identifier(self, identifier: str) -> UserRecord | None:
        return next((user for user in self.users if user.matches(identifier)), None)

    def find_by_email(self, email: str) -> UserRecord | None:
        return next((user for user in self.users if user.email == email), None)

    def insert(self, record: UserRecord) -> UserRecord:
        with self._lock:
            check_unique(self.users, record)
            self.users.append(record)
        return record

    def update(self, username: str, mutator: UserMutator) -> UserRecord:
        with self._lock:
            for index, user in enumerate(self.users):
                if user.username == username:
                    self.users[index] = mutator(user)
                    return self.users[index]
        raise NotFoundError()

    def count(self) -> int:
        return len(self.users)


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository for tests."""

    sessions: dict[str, SessionRecord] = field(default_factory=dict)

    def save_session(self, session: SessionRecord) -> None:
        self.sessions[session.token] = session

    def get_session(self, token: str) -> SessionRecord | None:
        return self.sessions.get(token)

    def update_session(
        self, token: str, mutator: SnapshotMutator
    ) -> SessionRecord | None:
        session = self.sessions.get(token)
        if session is None:
            return None
        updated = replace(session, user=mutator(session.user))
        self.sessions[token] = updated
        return updated

    def delete_session(self, token: str) -> None:
        self.sessions.pop(token, None)

    def delete_expired(self, now: datetime) -> int:
        expired = [t for t, s in self.sessions.items() if s.is_expired(now)]
        for token in expired:
            del self.sessions[token]
        return len(expired)


@dataclass
class InMemoryPhotoStorage(PhotoStorage):
    """Photo storage that keeps assets in a dict."""

    files: dict[str, bytes] = field(default_factory=dict)
    fail_deletes: bool = False
    deleted: list[str] = field(default_factory=list)

    def save(self, photo_ref: str, content: bytes) -> None:
        self.files[photo_ref] = content

    def delete(self, photo_ref: str) -> None:
        if self.fail_deletes:
            raise StorageError()
        self.deleted.append(photo_ref)
        self.files.pop(photo_ref, None)


@dataclass
class FakeCredentialHasher(CredentialHasher):
    """Reversible stand-in for argon2 so service tests stay fast."""

    hashed: list[str] = field(default_factory=list)

    def hash(self, plaintext: str) -> str:
        self.hashed.append(plaintext)
        return f"fake${plaintext[::-1]}"

    def verify(self, plaintext: str, hashed: str) -> bool:
        return hashed == f"fake${plaintext[::-1]}"


@dataclass
class FakeClock:
    """Manually advanced clock."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@dataclass
class ServiceBundle:
    """Services wired over in-memory fakes."""

    users: InMemoryUserRepository
    session_repository: InMemorySessionRepository
    storage: InMemoryPhotoStorage
    hasher: FakeCredentialHasher
    clock: FakeClock
    sessions: SessionService
    auth: AuthService
    profile: ProfileService


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def services(clock: FakeClock) -> ServiceBundle:
    users = InMemoryUserRepository()
    session_repository = InMemorySessionRepository()
    storage = InMemoryPhotoStorage()
    hasher = FakeCredentialHasher()
    sessions = SessionService(session_repository, ttl_seconds=86400, clock=clock)
    auth = AuthService(users=users, sessions=sessions, hasher=hasher)
    profile = ProfileService(auth=auth, users=users, storage=storage, clock=clock)
    return ServiceBundle(
        users=users,
        session_repository=session_repository,
        storage=storage,
        hasher=hasher,
        clock=clock,
        sessions=sessions,
        auth=auth,
        profile=profile,
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        data_dir=tmp_path / "data",
        uploads_dir=tmp_path / "uploads",
        password_hash_time_cost=1,
        password_hash_memory_cost=8,
        password_hash_parallelism=1,
        admin_password="admin-pass",
    )


@pytest.fixture
def container(settings: Settings) -> AppContainer:
    return build_container(settings)


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


def signup_payload(**overrides: str) -> dict[str, str]:
    payload = {
        "username": "alice",
        "displayName": "Alice A",
        "studentId": "123",
        "email": "a@x.com",
        "password": "p1",
    }
    payload.update(overrides)
    return payload
