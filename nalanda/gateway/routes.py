"""
Gateway proxy endpoints.

Browser-facing routes that attach the caller's session token and forward to
the auth and book services. Backend statuses and bodies are passed through.
"""
import logging
from typing import Any, Dict, Optional

import requests
from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from jose import JWTError, jwt

from nalanda.core.config import settings
from nalanda.gateway.client import AUTH, BOOKS, BackendClient, get_backend_client
from nalanda.models.user import Role

router = APIRouter()
logger = logging.getLogger(__name__)

SERVICE_UNAVAILABLE = {"error": "Service unavailable, please try again later"}


def get_session_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, falling back to the session cookie."""
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials:
            return credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def require_session(token: Optional[str] = Depends(get_session_token)) -> str:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return token


def require_admin(token: str = Depends(require_session)) -> str:
    """
    Reject non-admin sessions before contacting the backend.

    The claims are read without verifying the signature; the backend still
    verifies the token on every call.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    if claims.get("role") != Role.ADMIN.value:
        logger.warning(f"Non-admin session for subject {claims.get('sub')} denied at the gateway")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return token


def _relay(backend: requests.Response) -> Response:
    if backend.status_code == status.HTTP_204_NO_CONTENT or not backend.content:
        return Response(status_code=backend.status_code)
    try:
        content = backend.json()
    except ValueError:
        content = {"detail": backend.text}
    return JSONResponse(status_code=backend.status_code, content=content)


def _unavailable(path: str, error: Exception) -> JSONResponse:
    logger.error(f"Backend call to {path} failed: {str(error)}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=SERVICE_UNAVAILABLE)


def _forward(
    client: BackendClient,
    service: str,
    method: str,
    path: str,
    token: Optional[str] = None,
    json: Optional[Dict[str, Any]] = None,
) -> Response:
    try:
        backend = client.request(service, method, path, token=token, json=json)
    except requests.RequestException as e:
        return _unavailable(path, e)
    return _relay(backend)


def _open_session(client: BackendClient, path: str, body: Dict[str, Any]) -> Response:
    """
    Forward a login or registration and store the issued token in the session cookie.
    """
    try:
        backend = client.request(AUTH, "POST", path, json=body)
    except requests.RequestException as e:
        return _unavailable(path, e)

    response = _relay(backend)
    if backend.ok:
        try:
            token = backend.json().get("token")
        except ValueError:
            logger.warning(f"Backend answered {path} without a JSON body")
            token = None
        if token:
            response.set_cookie(
                key=settings.SESSION_COOKIE_NAME,
                value=token,
                max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
                httponly=True,
                samesite="lax",
            )
    return response


# Authentication

@router.post("/api/auth/register", summary="Register a reader")
def register(body: Dict[str, Any] = Body(...), client: BackendClient = Depends(get_backend_client)):
    return _open_session(client, "/auth/register", body)


@router.post("/api/auth/register-author", summary="Register an author")
def register_author(body: Dict[str, Any] = Body(...), client: BackendClient = Depends(get_backend_client)):
    return _open_session(client, "/auth/register-author", body)


@router.post("/api/auth/login", summary="Log in with email and password")
def login(body: Dict[str, Any] = Body(...), client: BackendClient = Depends(get_backend_client)):
    return _open_session(client, "/auth/login", body)


@router.post("/api/auth/google", summary="Log in with a Google authorization code")
def google_login(body: Dict[str, Any] = Body(...), client: BackendClient = Depends(get_backend_client)):
    return _open_session(client, "/auth/google", body)


@router.post("/api/auth/logout", summary="Clear the session cookie")
def logout():
    response = JSONResponse(content={"message": "Logged out"})
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response


# User administration

@router.get("/api/admin/users/readers", summary="List readers")
def list_readers(token: str = Depends(require_admin), client: BackendClient = Depends(get_backend_client)):
    return _forward(client, AUTH, "GET", "/api/users/readers", token=token)


@router.get("/api/admin/users/authors", summary="List authors")
def list_authors(token: str = Depends(require_admin), client: BackendClient = Depends(get_backend_client)):
    return _forward(client, AUTH, "GET", "/api/users/authors", token=token)


@router.get("/api/admin/users/authors/{user_id}", summary="Get an author")
def get_author(
    user_id: int,
    token: str = Depends(require_admin),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, AUTH, "GET", f"/api/users/authors/{user_id}", token=token)


@router.patch("/api/admin/users/{user_id}/activate", summary="Activate a user")
def activate_user(
    user_id: int,
    token: str = Depends(require_admin),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, AUTH, "PATCH", f"/api/users/{user_id}/activate", token=token)


@router.patch("/api/admin/users/{user_id}/deactivate", summary="Deactivate a user")
def deactivate_user(
    user_id: int,
    token: str = Depends(require_admin),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, AUTH, "PATCH", f"/api/users/{user_id}/deactivate", token=token)


@router.patch("/api/admin/users/{user_id}/profile-picture", summary="Change a user's profile picture")
def change_profile_picture(
    user_id: int,
    body: Dict[str, Any] = Body(...),
    token: str = Depends(require_admin),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, AUTH, "PATCH", f"/api/users/{user_id}/profile-picture", token=token, json=body)


@router.patch("/api/users/readers/{user_id}/subscription", summary="Change a reader's subscription")
def change_subscription(
    user_id: int,
    body: Dict[str, Any] = Body(...),
    token: str = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, AUTH, "PATCH", f"/api/users/readers/{user_id}/subscription", token=token, json=body)


# Book approval

@router.get("/api/admin/books/pending", summary="List books awaiting approval")
def list_pending_books(token: str = Depends(require_admin), client: BackendClient = Depends(get_backend_client)):
    return _forward(client, BOOKS, "GET", "/api/Books/pending", token=token)


@router.post("/api/admin/books/{book_id}/approve", summary="Approve a book")
def approve_book(
    book_id: int,
    token: str = Depends(require_admin),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, BOOKS, "POST", f"/api/Books/{book_id}/approve", token=token)


# Books

@router.get("/api/books", summary="List approved books")
def list_books(client: BackendClient = Depends(get_backend_client)):
    return _forward(client, BOOKS, "GET", "/api/Books")


@router.post("/api/books", summary="Submit a book")
def create_book(
    body: Dict[str, Any] = Body(...),
    token: str = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, BOOKS, "POST", "/api/Books", token=token, json=body)


@router.get("/api/books/{book_id}", summary="Get a book")
def get_book(
    book_id: int,
    token: Optional[str] = Depends(get_session_token),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, BOOKS, "GET", f"/api/Books/{book_id}", token=token)


@router.put("/api/books/{book_id}", summary="Update a book")
def update_book(
    book_id: int,
    body: Dict[str, Any] = Body(...),
    token: str = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, BOOKS, "PUT", f"/api/Books/{book_id}", token=token, json=body)


@router.delete("/api/books/{book_id}", summary="Delete a book")
def delete_book(
    book_id: int,
    token: str = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, BOOKS, "DELETE", f"/api/Books/{book_id}", token=token)


@router.get("/api/books/{book_id}/chunks/{chunk_number}", summary="Get a chunk of a book")
def get_chunk(
    book_id: int,
    chunk_number: int,
    token: Optional[str] = Depends(get_session_token),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, BOOKS, "GET", f"/api/Books/{book_id}/chunks/{chunk_number}", token=token)


# Reviews

@router.get("/api/reviews", summary="List all reviews")
def list_reviews(client: BackendClient = Depends(get_backend_client)):
    return _forward(client, BOOKS, "GET", "/api/BookReview")


@router.post("/api/reviews", summary="Review a book")
def create_review(
    body: Dict[str, Any] = Body(...),
    token: str = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, BOOKS, "POST", "/api/BookReview", token=token, json=body)


@router.get("/api/reviews/book/{book_id}", summary="List a book's reviews")
def list_book_reviews(book_id: int, client: BackendClient = Depends(get_backend_client)):
    return _forward(client, BOOKS, "GET", f"/api/BookReview/book/{book_id}")


@router.get("/api/reviews/book/{book_id}/stats", summary="Rating summary for a book")
def get_book_review_stats(book_id: int, client: BackendClient = Depends(get_backend_client)):
    return _forward(client, BOOKS, "GET", f"/api/BookReview/book/{book_id}/stats")


@router.get("/api/reviews/user/{user_id}", summary="List a user's reviews")
def list_user_reviews(user_id: int, client: BackendClient = Depends(get_backend_client)):
    return _forward(client, BOOKS, "GET", f"/api/BookReview/user/{user_id}")


@router.get("/api/reviews/{review_id}", summary="Get a review")
def get_review(review_id: int, client: BackendClient = Depends(get_backend_client)):
    return _forward(client, BOOKS, "GET", f"/api/BookReview/{review_id}")


@router.put("/api/reviews/{review_id}", summary="Update a review")
def update_review(
    review_id: int,
    body: Dict[str, Any] = Body(...),
    token: str = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, BOOKS, "PUT", f"/api/BookReview/{review_id}", token=token, json=body)


@router.delete("/api/reviews/{review_id}", summary="Delete a review")
def delete_review(
    review_id: int,
    token: str = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, BOOKS, "DELETE", f"/api/BookReview/{review_id}", token=token)


# Bookmarks and usage

@router.get("/api/bookmarks", summary="List the caller's bookmarks")
def list_bookmarks(token: str = Depends(require_session), client: BackendClient = Depends(get_backend_client)):
    return _forward(client, BOOKS, "GET", "/api/Bookmark", token=token)


@router.post("/api/bookmark", summary="Bookmark a book")
def add_bookmark(
    body: Dict[str, Any] = Body(...),
    token: str = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, BOOKS, "POST", "/api/Bookmark", token=token, json=body)


@router.delete("/api/bookmark/{book_id}", summary="Remove a bookmark")
def remove_bookmark(
    book_id: int,
    token: str = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    return _forward(client, BOOKS, "DELETE", f"/api/Bookmark/{book_id}", token=token)


@router.get("/api/usage", summary="Get the caller's reading quota")
def get_usage(token: str = Depends(require_session), client: BackendClient = Depends(get_backend_client)):
    return _forward(client, BOOKS, "GET", "/api/Usage/me", token=token)
