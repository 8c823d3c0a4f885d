"""
Pytest fixtures for newsreader tests.
"""

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from newsreader.config import state
from newsreader.database import Database
from newsreader.fetcher import FetchOk, FetchOutcome, NetworkError
from newsreader.normalizer import CanonicalItem
from newsreader.refresh import RefreshOrchestrator
from newsreader.server import app

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class StubFetcher:
    """Fetcher stand-in that serves canned outcomes by URL."""

    def __init__(self):
        self.responses: dict[str, FetchOutcome] = {}
        self.requested: list[str] = []

    def serve(self, url: str, body: bytes | str, content_type: str = "application/rss+xml"):
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.responses[url] = FetchOk(url=url, body=body, content_type=content_type)

    def fail(self, url: str, outcome: FetchOutcome):
        self.responses[url] = outcome

    async def fetch(self, url: str) -> FetchOutcome:
        self.requested.append(url)
        return self.responses.get(url, NetworkError(message=f"Cannot connect to {url}"))


@pytest.fixture
def load_fixture():
    """Read a file from tests/fixtures as bytes."""
    def _load(name: str) -> bytes:
        return (FIXTURES_DIR / name).read_bytes()
    return _load


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        yield Path(f.name)
    # Cleanup, including WAL side files
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(f.name + suffix):
            os.unlink(f.name + suffix)


@pytest.fixture
def test_db(temp_db_path):
    """Create a test database instance."""
    db = Database(temp_db_path)
    yield db


@pytest.fixture
def stub_fetcher():
    return StubFetcher()


@pytest.fixture
def orchestrator(test_db, stub_fetcher):
    return RefreshOrchestrator(test_db, stub_fetcher)


@pytest.fixture
def make_item():
    """Build a CanonicalItem with sensible defaults."""
    def _make(identity: str, **overrides) -> CanonicalItem:
        values = {
            "identity": identity,
            "title": f"Title {identity}",
            "link": f"https://example.com/{identity}",
            "author": "",
            "raw_content": f"<p>Content {identity}</p>",
            "snippet": f"Content {identity}",
            "published_at": datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc),
        }
        values.update(overrides)
        return CanonicalItem(**values)
    return _make


def _install_state(db: Database, fetcher: StubFetcher):
    original = (state.db, state.fetcher, state.orchestrator, state.scheduler)
    state.db = db
    state.fetcher = fetcher
    state.orchestrator = RefreshOrchestrator(db, fetcher)
    state.scheduler = None
    return original


def _restore_state(original):
    state.db, state.fetcher, state.orchestrator, state.scheduler = original


@pytest.fixture
def client(temp_db_path, stub_fetcher):
    """Create a test client with an isolated database and a stub fetcher."""
    original = _install_state(Database(temp_db_path), stub_fetcher)

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    _restore_state(original)


@pytest.fixture
def client_with_data(temp_db_path, stub_fetcher, make_item):
    """Test client with a folder, a feed and two articles pre-populated."""
    test_db = Database(temp_db_path)
    original = _install_state(test_db, stub_fetcher)

    folder_id = test_db.add_folder("Tech")
    feed_id = test_db.add_feed(
        url="https://example.com/feed.xml",
        title="Test Feed",
        site_url="https://example.com/",
        folder_id=folder_id,
    )
    test_db.insert_many_if_absent(feed_id, [
        make_item(
            "article-1",
            published_at=datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc),
        ),
        make_item(
            "article-2",
            title="<b>Bold</b> title",
            raw_content='<p onclick="steal()">Hello</p><script>alert(1)</script>',
            published_at=datetime(2025, 6, 2, 12, 0, tzinfo=timezone.utc),
        ),
    ])
    article_ids = {a.guid: a.id for a in test_db.get_articles(feed_id=feed_id)}
    test_db.mark_read(article_ids["article-1"], True)

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client, {
            "folder_id": folder_id,
            "feed_id": feed_id,
            "article_ids": [article_ids["article-1"], article_ids["article-2"]],
        }

    _restore_state(original)
