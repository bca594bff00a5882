"""
Tests for the bookmark service.
"""
import pytest

from nalanda.core.exceptions import ConflictError, NotFoundError
from nalanda.services.bookmark_service import BookmarkService


@pytest.fixture
def bookmark_service(db_session):
    return BookmarkService(db_session)


def test_add_and_list_bookmarks(bookmark_service, make_book, author, reader):
    first = make_book(author, title="First Book")
    second = make_book(author, title="Second Book")

    bookmark_service.add_bookmark(reader.id, first.id)
    bookmark_service.add_bookmark(reader.id, second.id)

    bookmarks = bookmark_service.list_bookmarks(reader.id)

    assert [b.book_id for b in bookmarks] == [second.id, first.id]
    assert bookmarks[0].book_title == "Second Book"
    assert bookmark_service.list_bookmarks(author.id) == []


def test_bookmark_unknown_book(bookmark_service, reader):
    with pytest.raises(NotFoundError):
        bookmark_service.add_bookmark(reader.id, 9999)


def test_duplicate_bookmark(bookmark_service, make_book, author, reader):
    book = make_book(author)
    bookmark_service.add_bookmark(reader.id, book.id)

    with pytest.raises(ConflictError):
        bookmark_service.add_bookmark(reader.id, book.id)


def test_remove_bookmark(bookmark_service, make_book, author, reader):
    book = make_book(author)
    bookmark_service.add_bookmark(reader.id, book.id)

    bookmark_service.remove_bookmark(reader.id, book.id)

    assert bookmark_service.list_bookmarks(reader.id) == []
    with pytest.raises(NotFoundError):
        bookmark_service.remove_bookmark(reader.id, book.id)


def test_remove_bookmark_rolls_back_on_failure(bookmark_service, make_book, author, reader, db_session, monkeypatch):
    book = make_book(author)
    bookmark_service.add_bookmark(reader.id, book.id)

    def failing_commit():
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(db_session, "commit", failing_commit)

    with pytest.raises(RuntimeError):
        bookmark_service.remove_bookmark(reader.id, book.id)

    monkeypatch.undo()
    assert [b.book_id for b in bookmark_service.list_bookmarks(reader.id)] == [book.id]
