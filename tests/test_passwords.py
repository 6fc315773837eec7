"""Tests for argon2 password hashing."""

import pytest

from student_portal.domain.errors import HashingError
from student_portal.services.passwords import Argon2CredentialHasher


@pytest.fixture
def hasher() -> Argon2CredentialHasher:
    return Argon2CredentialHasher(time_cost=1, memory_cost=8, parallelism=1)


def test_hash_is_salted_and_verifies(hasher: Argon2CredentialHasher) -> None:
    first = hasher.hash("secret")
    second = hasher.hash("secret")

    assert first != second
    assert "secret" not in first
    assert first.startswith("$argon2id$")
    assert hasher.verify("secret", first)
    assert hasher.verify("secret", second)


def test_verify_rejects_wrong_password(hasher: Argon2CredentialHasher) -> None:
    hashed = hasher.hash("secret")

    assert hasher.verify("Secret", hashed) is False


def test_verify_rejects_malformed_or_empty_input(
    hasher: Argon2CredentialHasher,
) -> None:
    assert hasher.verify("secret", "not-a-hash") is False
    assert hasher.verify("secret", "") is False
    assert hasher.verify("", hasher.hash("secret")) is False


def test_hash_rejects_empty_password(hasher: Argon2CredentialHasher) -> None:
    with pytest.raises(HashingError):
        hasher.hash("")


def test_work_factor_is_encoded_in_hash() -> None:
    hasher = Argon2CredentialHasher(time_cost=2, memory_cost=16, parallelism=1)

    assert "m=16,t=2,p=1" in hasher.hash("secret")
