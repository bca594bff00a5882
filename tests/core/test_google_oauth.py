"""
Tests for the Google OAuth code exchange.
"""
from unittest.mock import MagicMock

import pytest
import requests

from nalanda.core.config import settings
from nalanda.core.exceptions import OAuthExchangeError
from nalanda.core.google_oauth import GoogleOAuthClient, GoogleUserInfo

REDIRECT_URI = "http://localhost:3000/auth/callback"


def _response(payload=None, error=None):
    response = MagicMock()
    response.json.return_value = payload
    if error:
        response.raise_for_status.side_effect = error
    return response


@pytest.fixture
def http():
    """Mock requests session."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def oauth_client(http):
    return GoogleOAuthClient(client_id="client-id", client_secret="client-secret", session=http)


def test_exchange_code(http, oauth_client):
    http.post.return_value = _response({"access_token": "google-access-token"})
    http.get.return_value = _response({"id": "1234", "email": "jane@example.com", "name": "Jane"})

    info = oauth_client.exchange_code("auth-code", REDIRECT_URI)

    assert info == GoogleUserInfo(id="1234", email="jane@example.com", name="Jane")

    _, kwargs = http.post.call_args
    assert http.post.call_args[0][0] == settings.GOOGLE_TOKEN_URL
    assert kwargs["data"]["code"] == "auth-code"
    assert kwargs["data"]["grant_type"] == "authorization_code"
    assert kwargs["data"]["redirect_uri"] == REDIRECT_URI
    assert kwargs["timeout"] == settings.OAUTH_TIMEOUT_SECONDS

    _, kwargs = http.get.call_args
    assert kwargs["headers"] == {"Authorization": "Bearer google-access-token"}


@pytest.mark.parametrize("code, redirect_uri", [
    ("", REDIRECT_URI),
    ("   ", REDIRECT_URI),
    ("auth-code", ""),
    ("auth-code", "/relative/callback"),
    ("auth-code", "ftp://example.com/callback"),
])
def test_invalid_arguments(http, oauth_client, code, redirect_uri):
    with pytest.raises(ValueError):
        oauth_client.exchange_code(code, redirect_uri)

    http.post.assert_not_called()


def test_rejected_code(http, oauth_client):
    http.post.return_value = _response(error=requests.HTTPError("400 Bad Request"))

    with pytest.raises(OAuthExchangeError):
        oauth_client.exchange_code("bad-code", REDIRECT_URI)

    http.get.assert_not_called()


def test_network_failure_is_not_retried(http, oauth_client):
    http.post.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(OAuthExchangeError):
        oauth_client.exchange_code("auth-code", REDIRECT_URI)

    assert http.post.call_count == 1


def test_missing_access_token(http, oauth_client):
    http.post.return_value = _response({"token_type": "Bearer"})

    with pytest.raises(OAuthExchangeError):
        oauth_client.exchange_code("auth-code", REDIRECT_URI)


def test_incomplete_profile(http, oauth_client):
    http.post.return_value = _response({"access_token": "google-access-token"})
    http.get.return_value = _response({"id": "1234", "name": "Jane"})

    with pytest.raises(OAuthExchangeError) as exc_info:
        oauth_client.exchange_code("auth-code", REDIRECT_URI)

    assert "email" in exc_info.value.message
