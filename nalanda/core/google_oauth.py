"""
Google OAuth code exchange module.

Trades an authorization code for the caller's Google identity.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import requests

from nalanda.core.config import settings
from nalanda.core.exceptions import OAuthExchangeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoogleUserInfo:
    """Identity returned by Google's userinfo endpoint."""
    id: str
    email: str
    name: str


def _is_absolute_uri(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class GoogleOAuthClient:
    """
    Client for Google's OAuth 2.0 authorization-code flow.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            client_id: OAuth client id, defaults to the configured one
            client_secret: OAuth client secret, defaults to the configured one
            session: Optional requests session to reuse connections
        """
        self.client_id = client_id or settings.GOOGLE_CLIENT_ID
        self.client_secret = client_secret or settings.GOOGLE_CLIENT_SECRET
        self.http = session or requests.Session()
        self.timeout = settings.OAUTH_TIMEOUT_SECONDS

    def exchange_code(self, code: str, redirect_uri: str) -> GoogleUserInfo:
        """
        Exchange an authorization code for the user's Google profile.

        Args:
            code: The authorization code from the consent redirect
            redirect_uri: The redirect URI the code was issued for

        Returns:
            GoogleUserInfo: The external id, email and name

        Raises:
            ValueError: If the code or redirect URI is missing or malformed
            OAuthExchangeError: If Google cannot be reached or rejects the exchange
        """
        if not code or not code.strip():
            raise ValueError("Authorization code is required")
        if not redirect_uri or not _is_absolute_uri(redirect_uri):
            raise ValueError("Redirect URI must be an absolute URI")

        try:
            token_response = self.http.post(
                settings.GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": redirect_uri,
                    "grant_type": "authorization_code",
                },
                timeout=self.timeout,
            )
            token_response.raise_for_status()
            access_token = token_response.json().get("access_token")
            if not access_token:
                raise OAuthExchangeError("Google did not return an access token")

            userinfo_response = self.http.get(
                settings.GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
            userinfo_response.raise_for_status()
            payload = userinfo_response.json()
        except requests.RequestException as e:
            logger.error(f"Google OAuth exchange failed: {str(e)}")
            raise OAuthExchangeError(f"Google authentication failed: {str(e)}")
        except ValueError as e:
            # Non-JSON body from Google
            logger.error(f"Unreadable response from Google: {str(e)}")
            raise OAuthExchangeError("Google returned an unreadable response")

        missing = [field for field in ("id", "email", "name") if not payload.get(field)]
        if missing:
            raise OAuthExchangeError(f"Google profile is missing fields: {', '.join(missing)}")

        return GoogleUserInfo(
            id=str(payload["id"]),
            email=payload["email"],
            name=payload["name"],
        )


def get_google_oauth_client() -> GoogleOAuthClient:
    """FastAPI dependency returning the OAuth client."""
    return GoogleOAuthClient()
