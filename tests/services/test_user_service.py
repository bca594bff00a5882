"""
Tests for the user administration service.
"""
import pytest

from nalanda.core.exceptions import InvalidRequestError, NotFoundError
from nalanda.models.user import SubscriptionTier
from nalanda.schemas.user import UserProfileUpdate
from nalanda.services.user_service import UserService


@pytest.fixture
def user_service(db_session):
    return UserService(db_session)


def test_list_readers_and_authors(user_service, reader, premium_reader, author, admin):
    readers = user_service.list_readers()
    authors = user_service.list_authors()

    assert [r.id for r in readers] == [reader.id, premium_reader.id]
    assert [a.id for a in authors] == [author.id]


def test_role_scoped_lookups(user_service, reader, author):
    assert user_service.get_reader(reader.id).email == reader.email
    assert user_service.get_reader(author.id) is None
    assert user_service.get_author(author.id).email == author.email
    assert user_service.get_author(reader.id) is None
    assert user_service.get_reader(9999) is None


def test_deactivate_and_activate(user_service, reader):
    assert user_service.deactivate_user(reader.id).active is False
    assert user_service.activate_user(reader.id).active is True


def test_activate_unknown_user(user_service):
    with pytest.raises(NotFoundError):
        user_service.activate_user(9999)


def test_change_subscription(user_service, reader):
    user = user_service.change_subscription(reader.id, SubscriptionTier.PREMIUM)

    assert user.subscription == SubscriptionTier.PREMIUM


def test_change_subscription_of_author(user_service, author):
    with pytest.raises(InvalidRequestError):
        user_service.change_subscription(author.id, SubscriptionTier.PREMIUM)


def test_change_subscription_to_author_tier(user_service, reader):
    with pytest.raises(InvalidRequestError):
        user_service.change_subscription(reader.id, SubscriptionTier.AUTHOR)


def test_change_subscription_unknown_user(user_service):
    with pytest.raises(NotFoundError):
        user_service.change_subscription(9999, SubscriptionTier.PREMIUM)


def test_change_profile_picture(user_service, reader):
    user = user_service.change_profile_picture(reader.id, "https://cdn.example.com/me.png")

    assert user.profile_picture_url == "https://cdn.example.com/me.png"


def test_update_profile_creates_then_updates(user_service, reader):
    assert user_service.get_profile(reader.id) is None

    profile = user_service.update_profile(reader.id, UserProfileUpdate(address="12 Temple Road", occupation="Teacher"))
    assert profile.user_id == reader.id
    assert profile.address == "12 Temple Road"

    profile = user_service.update_profile(reader.id, UserProfileUpdate(occupation="Librarian"))
    assert profile.address == "12 Temple Road"
    assert profile.occupation == "Librarian"
