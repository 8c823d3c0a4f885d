"""
Tests for the SQLite store: idempotent ingestion, feeds and folders.
"""

import sqlite3
from datetime import datetime, timezone

import pytest

from newsreader.database import Database
from newsreader.database.connection import MEMORY


@pytest.fixture
def feed_id(test_db):
    return test_db.add_feed("https://example.com/feed.xml", "Example")


class TestInsertIfAbsent:

    def test_inserts_new_items(self, test_db, feed_id, make_item):
        inserted = test_db.insert_many_if_absent(feed_id, [make_item("a"), make_item("b")])
        assert inserted == 2
        assert test_db.count_articles(feed_id) == 2

    def test_reingest_is_a_no_op(self, test_db, feed_id, make_item):
        items = [make_item("a"), make_item("b")]
        test_db.insert_many_if_absent(feed_id, items)
        assert test_db.insert_many_if_absent(feed_id, items) == 0
        assert test_db.count_articles(feed_id) == 2

    def test_only_new_identities_inserted(self, test_db, feed_id, make_item):
        test_db.insert_many_if_absent(feed_id, [make_item("a")])
        assert test_db.insert_many_if_absent(feed_id, [make_item("a"), make_item("c")]) == 1

    def test_existing_row_is_never_updated(self, test_db, feed_id, make_item):
        test_db.insert_many_if_absent(feed_id, [make_item("a", title="Original")])
        article = test_db.get_articles(feed_id=feed_id)[0]
        test_db.mark_read(article.id)
        test_db.toggle_star(article.id)

        test_db.insert_many_if_absent(feed_id, [make_item("a", title="Edited upstream")])

        stored = test_db.get_article(article.id)
        assert stored.title == "Original"
        assert stored.is_read is True
        assert stored.is_starred is True
        assert stored.fetched_at == article.fetched_at

    def test_same_identity_in_two_feeds(self, test_db, feed_id, make_item):
        other = test_db.add_feed("https://other.example.com/feed.xml", "Other")
        test_db.insert_many_if_absent(feed_id, [make_item("shared")])
        assert test_db.insert_many_if_absent(other, [make_item("shared")]) == 1

    def test_duplicates_in_one_batch_collapse(self, test_db, feed_id, make_item):
        inserted = test_db.insert_many_if_absent(feed_id, [make_item("a"), make_item("a")])
        assert inserted == 1
        assert test_db.count_articles(feed_id) == 1

    def test_empty_batch(self, test_db, feed_id):
        assert test_db.insert_many_if_absent(feed_id, []) == 0

    def test_stored_fields(self, test_db, feed_id, make_item):
        published = datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
        test_db.insert_many_if_absent(feed_id, [make_item(
            "a",
            author="Ada",
            raw_content="<p>raw <script>x</script></p>",
            snippet="raw",
            published_at=published,
        )])
        article = test_db.get_articles(feed_id=feed_id)[0]
        assert article.guid == "a"
        assert article.author == "Ada"
        assert article.content == "<p>raw <script>x</script></p>"
        assert article.summary == "raw"
        assert article.published_at == published
        assert article.is_read is False
        assert article.is_starred is False
        assert article.fetched_at.tzinfo is not None

    def test_unknown_feed_rejected(self, test_db, make_item):
        with pytest.raises(sqlite3.IntegrityError):
            test_db.insert_many_if_absent(9999, [make_item("a")])


class TestArticleSurface:

    def test_newest_first(self, test_db, feed_id, make_item):
        test_db.insert_many_if_absent(feed_id, [
            make_item("old", published_at=datetime(2025, 1, 1, tzinfo=timezone.utc)),
            make_item("new", published_at=datetime(2025, 2, 1, tzinfo=timezone.utc)),
        ])
        assert [a.guid for a in test_db.get_articles()] == ["new", "old"]

    def test_list_by_folder(self, test_db, make_item):
        folder = test_db.add_folder("News")
        inside = test_db.add_feed("https://in.example.com/", "In", folder_id=folder)
        outside = test_db.add_feed("https://out.example.com/", "Out")
        test_db.insert_many_if_absent(inside, [make_item("in")])
        test_db.insert_many_if_absent(outside, [make_item("out")])

        assert [a.guid for a in test_db.get_articles(folder_id=folder)] == ["in"]

    def test_unread_only_and_limit(self, test_db, feed_id, make_item):
        test_db.insert_many_if_absent(feed_id, [make_item(str(i)) for i in range(5)])
        first = test_db.get_articles()[0]
        test_db.mark_read(first.id)

        assert len(test_db.get_articles(unread_only=True)) == 4
        assert len(test_db.get_articles(limit=2)) == 2

    def test_mark_read_unknown(self, test_db):
        assert test_db.mark_read(12345) is False

    def test_mark_all_read(self, test_db, feed_id, make_item):
        other = test_db.add_feed("https://other.example.com/", "Other")
        test_db.insert_many_if_absent(feed_id, [make_item("a"), make_item("b")])
        test_db.insert_many_if_absent(other, [make_item("c")])

        assert test_db.mark_all_read(feed_id) == 2
        assert test_db.get_feed(feed_id).unread_count == 0
        assert test_db.get_feed(other).unread_count == 1
        assert test_db.mark_all_read() == 1

    def test_toggle_star(self, test_db, feed_id, make_item):
        test_db.insert_many_if_absent(feed_id, [make_item("a")])
        article = test_db.get_articles()[0]

        assert test_db.toggle_star(article.id) is True
        assert [a.id for a in test_db.get_starred_articles()] == [article.id]
        assert test_db.toggle_star(article.id) is False
        assert test_db.get_starred_articles() == []
        assert test_db.toggle_star(12345) is None


class TestFeeds:

    def test_add_and_get(self, test_db):
        feed_id = test_db.add_feed(
            "https://example.com/rss", "Title", description="Desc", site_url="https://example.com/"
        )
        feed = test_db.get_feed(feed_id)
        assert feed.url == "https://example.com/rss"
        assert feed.title == "Title"
        assert feed.display_title == "Title"
        assert feed.last_fetched_at is None
        assert feed.error_message is None
        assert feed.created_at is not None
        assert test_db.get_feed_by_url("https://example.com/rss").id == feed_id

    def test_url_is_unique(self, test_db, feed_id):
        with pytest.raises(sqlite3.IntegrityError):
            test_db.add_feed("https://example.com/feed.xml", "Again")

    def test_fetch_error_then_success(self, test_db, feed_id):
        test_db.update_feed_error(feed_id, "HTTP 403")
        feed = test_db.get_feed(feed_id)
        assert feed.error_message == "HTTP 403"
        assert feed.last_fetched_at is None

        test_db.update_feed_success(feed_id, "New title", "New desc", "https://example.com/")
        feed = test_db.get_feed(feed_id)
        assert feed.error_message is None
        assert feed.title == "New title"
        assert feed.last_fetched_at is not None

    def test_error_keeps_metadata(self, test_db, feed_id):
        test_db.update_feed_success(feed_id, "Good title", "Desc", "https://example.com/")
        fetched_at = test_db.get_feed(feed_id).last_fetched_at

        test_db.update_feed_error(feed_id, "Timed out")
        feed = test_db.get_feed(feed_id)
        assert feed.title == "Good title"
        assert feed.last_fetched_at == fetched_at

    def test_rename_survives_refresh(self, test_db, feed_id):
        test_db.rename_feed(feed_id, "My name")
        test_db.update_feed_success(feed_id, "Published name", "", "")
        feed = test_db.get_feed(feed_id)
        assert feed.display_title == "My name"
        assert feed.title == "Published name"

        test_db.rename_feed(feed_id, "")
        assert test_db.get_feed(feed_id).display_title == "Published name"

    def test_delete_cascades_to_articles(self, test_db, feed_id, make_item):
        test_db.insert_many_if_absent(feed_id, [make_item("a")])
        assert test_db.delete_feed(feed_id) is True
        assert test_db.get_feed(feed_id) is None
        assert test_db.count_articles() == 0
        assert test_db.delete_feed(feed_id) is False

    def test_get_all_by_folder(self, test_db, feed_id):
        folder = test_db.add_folder("Tech")
        test_db.move_feed(feed_id, folder)
        test_db.add_feed("https://loose.example.com/", "Loose")

        assert [f.id for f in test_db.get_feeds(folder)] == [feed_id]
        assert len(test_db.get_feeds()) == 2


class TestFolders:

    def test_positions_increase(self, test_db):
        first = test_db.add_folder("One")
        second = test_db.add_folder("Two")
        folders = test_db.get_folders()
        assert [f.id for f in folders] == [first, second]
        assert folders[0].position < folders[1].position

    def test_rename(self, test_db):
        folder = test_db.add_folder("Old")
        test_db.rename_folder(folder, "New")
        assert test_db.get_folder(folder).name == "New"

    def test_delete_keeps_feeds(self, test_db, feed_id):
        folder = test_db.add_folder("Temp")
        test_db.move_feed(feed_id, folder)

        assert test_db.delete_folder(folder) is True
        feed = test_db.get_feed(feed_id)
        assert feed is not None
        assert feed.folder_id is None


class TestInMemory:

    def test_in_memory_database_persists_between_calls(self, make_item):
        db = Database(MEMORY)
        feed_id = db.add_feed("https://example.com/feed", "Mem")
        db.insert_many_if_absent(feed_id, [make_item("a")])
        assert db.count_articles(feed_id) == 1
        db.close()
