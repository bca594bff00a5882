"""
Pytest configuration file.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from nalanda.core.security import create_access_token, get_password_hash
from nalanda.db.session import Base, get_db
from nalanda.models import Book, BookChunk, Role, SubscriptionTier, User
from main import app


# Test database URL
TEST_DATABASE_URL = "sqlite:///:memory:"

TEST_PASSWORD = "TestPassword123!"


@pytest.fixture
def engine():
    """Create a fresh in-memory database for each test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """
    Create a new database session for a test.

    Services commit and roll back on their own, so every test gets its own
    database instead of a wrapping transaction.
    """
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def client(db_session):
    """
    Create a test client with a test database session.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """
    Factory for users stored in the test database.
    """
    def _make_user(
        email: str = "reader@example.com",
        name: str = "Test Reader",
        role: Role = Role.READER,
        subscription: SubscriptionTier = SubscriptionTier.FREE,
        active: bool = True,
        password: str = TEST_PASSWORD,
    ) -> User:
        user = User(
            email=email,
            name=name,
            password_hash=get_password_hash(password),
            role=role,
            subscription=subscription,
            active=active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def reader(make_user):
    return make_user()


@pytest.fixture
def premium_reader(make_user):
    return make_user(
        email="premium@example.com",
        name="Premium Reader",
        subscription=SubscriptionTier.PREMIUM,
    )


@pytest.fixture
def author(make_user):
    return make_user(
        email="author@example.com",
        name="Test Author",
        role=Role.AUTHOR,
        subscription=SubscriptionTier.AUTHOR,
    )


@pytest.fixture
def admin(make_user):
    return make_user(
        email="admin@example.com",
        name="Test Admin",
        role=Role.ADMIN,
        subscription=SubscriptionTier.PREMIUM,
    )


def auth_headers(user: User) -> dict:
    """Bearer headers carrying a fresh token for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def reader_headers(reader):
    return auth_headers(reader)


@pytest.fixture
def author_headers(author):
    return auth_headers(author)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def make_book(db_session):
    """
    Factory for books stored in the test database.
    """
    def _make_book(author: User, title: str = "The Test Book", approved: bool = True, chunks: int = 3) -> Book:
        book = Book(
            title=title,
            description="A book used in tests",
            author_id=author.id,
            author_name=author.name,
            is_approved=approved,
            slug=title.lower().replace(" ", "-"),
            chunks=[
                BookChunk(chunk_number=n, storage_path=f"books/{title}/chunk-{n}.pdf")
                for n in range(1, chunks + 1)
            ],
        )
        db_session.add(book)
        db_session.commit()
        db_session.refresh(book)
        return book

    return _make_book


@pytest.fixture
def headers_for():
    """Build bearer headers for any user."""
    return auth_headers
