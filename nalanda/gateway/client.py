"""
HTTP client for the backend services behind the gateway.
"""
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

import requests

from nalanda.core.config import settings

logger = logging.getLogger(__name__)

AUTH = "auth"
BOOKS = "books"


class BackendClient:
    """
    Forwards gateway calls to the auth and book services.

    Transport failures propagate as ``requests.RequestException``; backend
    error statuses are returned untouched.
    """

    def __init__(
        self,
        auth_url: Optional[str] = None,
        book_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the backend client.

        Args:
            auth_url: Base URL of the auth service
            book_url: Base URL of the book service
            timeout: Per-request timeout in seconds
            session: HTTP session to reuse connections across calls
        """
        self.base_urls = {
            AUTH: (auth_url or settings.AUTH_SERVICE_URL).rstrip("/"),
            BOOKS: (book_url or settings.BOOK_SERVICE_URL).rstrip("/"),
        }
        self.timeout = timeout or settings.PROXY_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def request(
        self,
        service: str,
        method: str,
        path: str,
        token: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """
        Send a request to a backend service.

        Args:
            service: ``AUTH`` or ``BOOKS``
            method: HTTP method
            path: Path on the backend, starting with ``/``
            token: Bearer token to forward, if any
            json: JSON body to forward, if any

        Returns:
            requests.Response: The backend's response
        """
        url = f"{self.base_urls[service]}{path}"
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug(f"Proxying {method} {url}")
        return self.session.request(method, url, headers=headers, json=json, timeout=self.timeout)


@lru_cache()
def get_backend_client() -> BackendClient:
    """FastAPI dependency returning the shared backend client."""
    return BackendClient()
