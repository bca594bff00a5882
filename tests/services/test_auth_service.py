"""
Tests for the auth service.
"""
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

from nalanda.core.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidRequestError,
    OAuthExchangeError,
)
from nalanda.core.google_oauth import GoogleOAuthClient, GoogleUserInfo
from nalanda.core.security import decode_access_token, verify_password
from nalanda.models.user import Role, SubscriptionTier, User
from nalanda.schemas.auth import (
    GoogleLoginRequest,
    LoginRequest,
    RegisterAuthorRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from nalanda.services.auth_service import AuthService

TEST_PASSWORD = "TestPassword123!"

REDIRECT_URI = "http://localhost:3000/auth/callback"


@pytest.fixture
def oauth_client():
    client = MagicMock(spec=GoogleOAuthClient)
    client.exchange_code.return_value = GoogleUserInfo(id="g-123", email="jane@example.com", name="Jane")
    return client


@pytest.fixture
def auth_service(db_session, oauth_client):
    return AuthService(db_session, oauth_client)


def test_register_local(auth_service, db_session):
    response = auth_service.register_local(RegisterRequest(
        email="New.Reader@Example.com",
        name="New Reader",
        password=TEST_PASSWORD,
    ))

    assert response.user.email == "new.reader@example.com"
    assert response.user.role == Role.READER
    assert response.user.subscription == SubscriptionTier.FREE

    token_data = decode_access_token(response.token)
    assert token_data.user_id == response.user.id

    stored = db_session.query(User).filter(User.id == response.user.id).one()
    assert verify_password(TEST_PASSWORD, stored.password_hash)


def test_register_duplicate_email(auth_service, reader):
    with pytest.raises(ConflictError):
        auth_service.register_local(RegisterRequest(
            email=reader.email,
            name="Someone Else",
            password=TEST_PASSWORD,
        ))


def test_register_duplicate_email_differs_in_case(auth_service, reader):
    with pytest.raises(ConflictError):
        auth_service.register_local(RegisterRequest(
            email=reader.email.upper(),
            name="Someone Else",
            password=TEST_PASSWORD,
        ))


def test_register_author(auth_service, db_session):
    response = auth_service.register_author(RegisterAuthorRequest(
        email="writer@example.com",
        name="Writer",
        password=TEST_PASSWORD,
        nic="199012345678",
        phone="+94771234567",
    ))

    assert response.user.role == Role.AUTHOR
    assert response.user.subscription == SubscriptionTier.AUTHOR

    stored = db_session.query(User).filter(User.id == response.user.id).one()
    assert stored.profile.nic == "199012345678"
    assert stored.profile.phone == "+94771234567"


def test_login_local(auth_service, reader):
    response = auth_service.login_local(LoginRequest(email=reader.email, password=TEST_PASSWORD))

    assert response.user.id == reader.id
    assert decode_access_token(response.token).email == reader.email


def test_login_wrong_password(auth_service, reader):
    with pytest.raises(AuthenticationError) as exc_info:
        auth_service.login_local(LoginRequest(email=reader.email, password="WrongPassword1!"))

    assert exc_info.value.message == "Invalid email or password"


def test_login_unknown_email(auth_service):
    with pytest.raises(AuthenticationError) as exc_info:
        auth_service.login_local(LoginRequest(email="ghost@example.com", password=TEST_PASSWORD))

    assert exc_info.value.message == "Invalid email or password"


def test_login_inactive_account(auth_service, make_user):
    user = make_user(email="inactive@example.com", active=False)

    with pytest.raises(AuthenticationError) as exc_info:
        auth_service.login_local(LoginRequest(email=user.email, password=TEST_PASSWORD))

    assert exc_info.value.message == "Account is deactivated"


def test_google_login_creates_reader(auth_service, oauth_client, db_session):
    response = auth_service.login_with_google(GoogleLoginRequest(code="auth-code", redirect_uri=REDIRECT_URI))

    oauth_client.exchange_code.assert_called_once_with("auth-code", REDIRECT_URI)
    assert response.user.email == "jane@example.com"
    assert response.user.role == Role.READER
    assert response.user.subscription == SubscriptionTier.FREE

    stored = db_session.query(User).filter(User.google_id == "g-123").one()
    assert stored.password_hash is None


def test_google_login_reuses_existing_google_user(auth_service, db_session):
    first = auth_service.login_with_google(GoogleLoginRequest(code="code-1", redirect_uri=REDIRECT_URI))
    second = auth_service.login_with_google(GoogleLoginRequest(code="code-2", redirect_uri=REDIRECT_URI))

    assert first.user.id == second.user.id
    assert db_session.query(User).count() == 1


def test_google_login_links_existing_email(auth_service, make_user, db_session):
    existing = make_user(email="jane@example.com", name="Jane")

    response = auth_service.login_with_google(GoogleLoginRequest(code="auth-code", redirect_uri=REDIRECT_URI))

    assert response.user.id == existing.id
    db_session.refresh(existing)
    assert existing.google_id == "g-123"


def test_google_login_invalid_redirect(auth_service, oauth_client):
    oauth_client.exchange_code.side_effect = ValueError("Redirect URI must be an absolute URI")

    with pytest.raises(InvalidRequestError):
        auth_service.login_with_google(GoogleLoginRequest(code="auth-code", redirect_uri="/callback"))


def test_google_login_exchange_failure(auth_service, oauth_client):
    oauth_client.exchange_code.side_effect = OAuthExchangeError("Google authentication failed")

    with pytest.raises(OAuthExchangeError):
        auth_service.login_with_google(GoogleLoginRequest(code="auth-code", redirect_uri=REDIRECT_URI))


def test_forgot_and_reset_password(auth_service, reader):
    token = auth_service.forgot_password(reader.email)
    assert token

    auth_service.reset_password(ResetPasswordRequest(token=token, new_password="BrandNewPass1!"))

    response = auth_service.login_local(LoginRequest(email=reader.email, password="BrandNewPass1!"))
    assert response.user.id == reader.id

    with pytest.raises(InvalidRequestError):
        auth_service.reset_password(ResetPasswordRequest(token=token, new_password="AnotherPass1!"))


def test_forgot_password_unknown_email(auth_service):
    assert auth_service.forgot_password("ghost@example.com") is None


def test_reset_password_expired_token(auth_service, reader, db_session):
    token = auth_service.forgot_password(reader.email)
    reader.password_reset_token_expiry = datetime.utcnow() - timedelta(minutes=1)
    db_session.commit()

    with pytest.raises(InvalidRequestError):
        auth_service.reset_password(ResetPasswordRequest(token=token, new_password="BrandNewPass1!"))


def test_ensure_default_admin(auth_service, db_session):
    with patch("nalanda.services.auth_service.settings") as mock_settings:
        mock_settings.ADMIN_PASSWORD = "AdminPassword1!"
        mock_settings.ADMIN_EMAIL = "admin@nalanda.com"
        mock_settings.ADMIN_NAME = "Administrator"

        admin = auth_service.ensure_default_admin()
        again = auth_service.ensure_default_admin()

    assert admin is not None
    assert admin.role == Role.ADMIN
    assert admin.subscription == SubscriptionTier.PREMIUM
    assert again is None
    assert db_session.query(User).filter(User.role == Role.ADMIN).count() == 1


def test_ensure_default_admin_without_password(auth_service, db_session):
    with patch("nalanda.services.auth_service.settings") as mock_settings:
        mock_settings.ADMIN_PASSWORD = None

        assert auth_service.ensure_default_admin() is None

    assert db_session.query(User).count() == 0
