"""
Tests for password hashing and access tokens.
"""
import base64
from datetime import timedelta

import pytest
from jose import jwt

from nalanda.core.config import settings
from nalanda.core.exceptions import AuthenticationError
from nalanda.core.security import (
    ITERATIONS,
    KEY_SIZE,
    SALT_SIZE,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from nalanda.models.user import Role, SubscriptionTier


def test_hash_format():
    """Hashes are base64 salt and key joined by a colon."""
    hashed = get_password_hash("TestPassword123!")

    salt, key = hashed.split(":")
    assert len(base64.b64decode(salt)) == SALT_SIZE
    assert len(base64.b64decode(key)) == KEY_SIZE
    assert ITERATIONS == 10000


def test_same_password_hashes_differently():
    first = get_password_hash("TestPassword123!")
    second = get_password_hash("TestPassword123!")

    assert first != second
    assert verify_password("TestPassword123!", first)
    assert verify_password("TestPassword123!", second)


def test_wrong_password_does_not_verify():
    hashed = get_password_hash("TestPassword123!")

    assert not verify_password("WrongPassword123!", hashed)


@pytest.mark.parametrize("password", ["", "   ", None])
def test_empty_password_rejected(password):
    with pytest.raises(ValueError):
        get_password_hash(password)


@pytest.mark.parametrize("stored", [
    None,
    "",
    "no-separator",
    "a:b:c",
    "not base64!:also not base64!",
])
def test_malformed_hash_fails_verification(stored):
    assert verify_password("TestPassword123!", stored) is False


def test_access_token_claims(reader):
    token = create_access_token(reader)
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])

    assert payload["sub"] == str(reader.id)
    assert payload["email"] == reader.email
    assert payload["name"] == reader.name
    assert payload["role"] == "Reader"
    assert payload["subscription"] == "Free"
    assert payload["exp"] > payload["iat"]


def test_decode_round_trips_claims(author):
    token_data = decode_access_token(create_access_token(author))

    assert token_data.user_id == author.id
    assert token_data.role == Role.AUTHOR
    assert token_data.subscription == SubscriptionTier.AUTHOR
    assert not token_data.is_admin


def test_decode_expired_token(reader):
    token = create_access_token(reader, expires_delta=timedelta(minutes=-5))

    with pytest.raises(AuthenticationError) as exc_info:
        decode_access_token(token)

    assert exc_info.value.message == "Token has expired"


def test_decode_token_with_wrong_key(reader):
    token = jwt.encode({"sub": str(reader.id)}, "some-other-key", algorithm=settings.ALGORITHM)

    with pytest.raises(AuthenticationError):
        decode_access_token(token)


def test_decode_token_without_subject():
    token = jwt.encode({"email": "nobody@example.com"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    with pytest.raises(AuthenticationError):
        decode_access_token(token)
