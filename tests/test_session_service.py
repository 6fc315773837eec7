"""Tests for the session lifecycle."""

from student_portal.domain.models import PublicUserView
from student_portal.services.sessions import SessionService, with_photo
from tests.conftest import FakeClock, InMemorySessionRepository

ALICE = PublicUserView(
    username="alice",
    display_name="Alice A",
    email="a@x.com",
    student_id="123",
    photo_ref="default-avatar.png",
)


def _service(clock: FakeClock) -> tuple[SessionService, InMemorySessionRepository]:
    repository = InMemorySessionRepository()
    return SessionService(repository, ttl_seconds=86400, clock=clock), repository


def test_create_issues_unique_tokens_with_fixed_expiry(clock: FakeClock) -> None:
    service, repository = _service(clock)

    first = service.create(ALICE)
    second = service.create(ALICE)

    assert first.token != second.token
    assert len(first.token) >= 32
    assert (first.expires_at - first.created_at).total_seconds() == 86400
    assert set(repository.sessions) == {first.token, second.token}


def test_resolve_returns_snapshot(clock: FakeClock) -> None:
    service, _ = _service(clock)
    session = service.create(ALICE)

    assert service.resolve(session.token) == ALICE


def test_resolve_unknown_or_empty_token(clock: FakeClock) -> None:
    service, _ = _service(clock)

    assert service.resolve("missing") is None
    assert service.resolve("") is None
    assert service.resolve(None) is None


def test_resolve_drops_expired_session(clock: FakeClock) -> None:
    service, repository = _service(clock)
    session = service.create(ALICE)

    clock.advance(hours=23, minutes=59)
    assert service.resolve(session.token) == ALICE

    clock.advance(minutes=1)
    assert service.resolve(session.token) is None
    assert session.token not in repository.sessions


def test_expiry_is_not_sliding(clock: FakeClock) -> None:
    service, _ = _service(clock)
    session = service.create(ALICE)

    clock.advance(hours=12)
    service.resolve(session.token)
    service.touch(session.token, with_photo("p.png"))
    clock.advance(hours=12)

    assert service.resolve(session.token) is None


def test_touch_patches_live_session(clock: FakeClock) -> None:
    service, _ = _service(clock)
    session = service.create(ALICE)

    patched = service.touch(session.token, with_photo("new.png"))

    assert patched is not None
    assert patched.photo_ref == "new.png"
    resolved = service.resolve(session.token)
    assert resolved is not None
    assert resolved.photo_ref == "new.png"


def test_touch_ignores_expired_session(clock: FakeClock) -> None:
    service, _ = _service(clock)
    session = service.create(ALICE)
    clock.advance(days=2)

    assert service.touch(session.token, with_photo("new.png")) is None


def test_destroy_is_idempotent(clock: FakeClock) -> None:
    service, _ = _service(clock)
    session = service.create(ALICE)

    service.destroy(session.token)
    service.destroy(session.token)
    service.destroy(None)

    assert service.resolve(session.token) is None


def test_reap_expired(clock: FakeClock) -> None:
    service, repository = _service(clock)
    old = service.create(ALICE)
    clock.advance(hours=20)
    fresh = service.create(ALICE)
    clock.advance(hours=5)

    assert service.reap_expired() == 1
    assert set(repository.sessions) == {fresh.token}
    assert old.token not in repository.sessions
