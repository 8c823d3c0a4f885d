"""
Tests for feed routes.
"""

import pytest

from newsreader.fetcher import HttpError
from newsreader.xss_feed_server import ATTACK_GUIDS, build_malicious_feed

NEW_FEED = "https://a.example.com/feed.xml"


class TestListFeeds:
    """Tests for GET /feeds endpoint."""

    def test_list_feeds_empty(self, client):
        response = client.get("/feeds")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_feeds_has_required_fields(self, client_with_data):
        client, data = client_with_data
        feed = client.get("/feeds").json()[0]
        assert feed["id"] == data["feed_id"]
        assert feed["url"] == "https://example.com/feed.xml"
        assert feed["title"] == "Test Feed"
        assert feed["folder_id"] == data["folder_id"]
        assert feed["last_fetched"] is None
        assert feed["fetch_error"] is None

    def test_list_feeds_includes_unread_count(self, client_with_data):
        client, data = client_with_data
        # One article read, one unread
        assert client.get("/feeds").json()[0]["unread_count"] == 1

    def test_list_feeds_by_folder(self, client_with_data):
        client, data = client_with_data
        assert len(client.get(f"/feeds?folder_id={data['folder_id']}").json()) == 1
        assert client.get("/feeds?folder_id=999").json() == []


class TestAddFeed:
    """Tests for POST /feeds endpoint."""

    def test_add_feed(self, client, stub_fetcher, load_fixture):
        stub_fetcher.serve(NEW_FEED, load_fixture("rss_two_items.xml"))

        response = client.post("/feeds", json={"url": NEW_FEED})

        assert response.status_code == 200
        feed = response.json()
        assert feed["title"] == "Source A"
        assert feed["unread_count"] == 2
        assert len(client.get(f"/articles?feed_id={feed['id']}").json()) == 2

    def test_add_feed_into_folder(self, client_with_data, stub_fetcher, load_fixture):
        client, data = client_with_data
        stub_fetcher.serve(NEW_FEED, load_fixture("rss_two_items.xml"))

        response = client.post("/feeds", json={"url": NEW_FEED, "folder_id": data["folder_id"]})

        assert response.status_code == 200
        assert response.json()["folder_id"] == data["folder_id"]

    def test_add_feed_unknown_folder(self, client):
        response = client.post("/feeds", json={"url": NEW_FEED, "folder_id": 999})
        assert response.status_code == 404

    def test_add_feed_fails_closed(self, client, stub_fetcher):
        stub_fetcher.fail(NEW_FEED, HttpError(status=403, message="HTTP 403: blocked"))

        response = client.post("/feeds", json={"url": NEW_FEED})

        assert response.status_code == 400
        assert "403" in response.json()["detail"]
        assert client.get("/feeds").json() == []

    def test_add_duplicate_feed(self, client_with_data):
        client, data = client_with_data
        response = client.post("/feeds", json={"url": "https://example.com/feed.xml"})
        assert response.status_code == 400
        assert "Already subscribed" in response.json()["detail"]

    def test_add_feed_missing_url(self, client):
        assert client.post("/feeds", json={}).status_code == 422


class TestUpdateFeed:
    """Tests for PUT /feeds/{feed_id} endpoint."""

    def test_rename(self, client_with_data):
        client, data = client_with_data
        response = client.put(f"/feeds/{data['feed_id']}", json={"title": "Renamed"})
        assert response.status_code == 200
        assert response.json()["title"] == "Renamed"

    def test_empty_title_restores_published_title(self, client_with_data):
        client, data = client_with_data
        client.put(f"/feeds/{data['feed_id']}", json={"title": "Renamed"})
        response = client.put(f"/feeds/{data['feed_id']}", json={"title": ""})
        assert response.json()["title"] == "Test Feed"

    def test_move_and_clear_folder(self, client_with_data):
        client, data = client_with_data
        other = client.post("/folders", json={"name": "Other"}).json()["id"]

        moved = client.put(f"/feeds/{data['feed_id']}", json={"folder_id": other}).json()
        assert moved["folder_id"] == other

        cleared = client.put(f"/feeds/{data['feed_id']}", json={"clear_folder": True}).json()
        assert cleared["folder_id"] is None

    def test_update_feed_not_found(self, client):
        assert client.put("/feeds/99999", json={"title": "x"}).status_code == 404

    def test_move_to_missing_folder(self, client_with_data):
        client, data = client_with_data
        response = client.put(f"/feeds/{data['feed_id']}", json={"folder_id": 999})
        assert response.status_code == 404


class TestRemoveFeed:
    """Tests for DELETE /feeds/{feed_id} endpoint."""

    def test_remove_feed_not_found(self, client):
        response = client.delete("/feeds/99999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Feed not found"

    def test_remove_feed_drops_articles(self, client_with_data):
        client, data = client_with_data
        response = client.delete(f"/feeds/{data['feed_id']}")
        assert response.status_code == 200
        assert client.get("/feeds").json() == []
        assert client.get("/articles").json() == []


class TestRefresh:

    def test_refresh_all(self, client, stub_fetcher, load_fixture):
        stub_fetcher.serve(NEW_FEED, load_fixture("rss_two_items.xml"))
        client.post("/feeds", json={"url": NEW_FEED})

        response = client.post("/feeds/refresh")

        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_refresh_one_records_error(self, client, stub_fetcher, load_fixture):
        stub_fetcher.serve(NEW_FEED, load_fixture("rss_two_items.xml"))
        feed_id = client.post("/feeds", json={"url": NEW_FEED}).json()["id"]
        stub_fetcher.fail(NEW_FEED, HttpError(status=503, message="HTTP 503"))

        response = client.post(f"/feeds/{feed_id}/refresh")

        assert response.status_code == 200
        # Previously stored articles are still served
        assert len(response.json()) == 2
        feed = client.get("/feeds").json()[0]
        assert feed["fetch_error"] == "HTTP 503"

    def test_refresh_one_not_found(self, client):
        assert client.post("/feeds/99999/refresh").status_code == 404


class TestMaliciousFeed:
    """A hostile feed never reaches a client unsanitized."""

    @pytest.fixture
    def hostile_feed_id(self, client, stub_fetcher):
        url = "https://hostile.example.com/feed"
        stub_fetcher.serve(url, build_malicious_feed("https://hostile.example.com"))
        return client.post("/feeds", json={"url": url}).json()["id"]

    def test_all_attacks_stored(self, client, hostile_feed_id):
        articles = client.get(f"/articles?feed_id={hostile_feed_id}").json()
        assert len(articles) == len(ATTACK_GUIDS)

    def test_article_bodies_are_neutralized(self, client, hostile_feed_id):
        for article in client.get(f"/articles?feed_id={hostile_feed_id}").json():
            content = client.get(f"/articles/{article['id']}").json()["content"]
            lowered = content.lower()
            assert "<script" not in lowered
            assert "onerror" not in lowered
            assert "<form" not in lowered
            assert "<input" not in lowered
            assert "<style" not in lowered
            assert "style=" not in lowered
            assert "<h2>" in content
