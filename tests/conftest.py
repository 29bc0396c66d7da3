"""Shared test fixtures for Creator Portfolio tests."""
from __future__ import annotations

import pytest

from creator_portfolio.database.connection import init_database
from creator_portfolio.database.repository import Repository
from creator_portfolio.ingestion.reel_scraper import ReelMetadata

TRUSTED_CHANNEL = "UC_trusted123"
OTHER_CHANNEL = "UC_intruder999"
CRON_SECRET = "test-cron-secret"


class FakeYouTubeClient:
    """Stands in for YouTubeDataClient; serves canned search/videos payloads."""

    def __init__(self):
        self.search_payload = {"items": []}
        self.details_payload = {"items": []}
        self.error = None
        self.calls = []

    def serve(self, *detail_items):
        """Make search return the ids of ``detail_items`` and details return them."""
        self.search_payload = {
            "items": [
                {"id": {"kind": "youtube#video", "videoId": item["id"]}}
                for item in detail_items
            ]
        }
        self.details_payload = {"items": list(detail_items)}

    def search_channel_videos(self, channel_id, max_results=12):
        self.calls.append(("search", channel_id, max_results))
        if self.error:
            raise self.error
        return self.search_payload

    def get_video_details(self, video_ids):
        self.calls.append(("videos", list(video_ids)))
        return self.details_payload


class FakeGenerativeClient:
    """Returns queued responses in order; an Exception in the queue is raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []
        self.temperatures = []

    def generate(self, prompt, temperature=None):
        self.prompts.append(prompt)
        self.temperatures.append(temperature)
        if not self.responses:
            raise AssertionError("unexpected generate() call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeScraper:
    def __init__(self, metadata=None):
        self.metadata = metadata or ReelMetadata(
            caption="Morning sketch routine #art #sketching",
            hashtags=["art", "sketching"],
            creator_username="sketchy_sam",
            thumbnail_url="https://cdn.example.com/thumb.jpg",
        )
        self.calls = []

    def scrape(self, url):
        self.calls.append(url)
        return self.metadata


def make_detail(
    video_id,
    channel_id=TRUSTED_CHANNEL,
    duration="PT5M",
    live="none",
    published_at="2024-01-01T00:00:00Z",
    title=None,
    views="100",
):
    """One item as returned by the YouTube videos endpoint."""
    snippet = {
        "title": title or f"Video {video_id}",
        "description": f"Description for {video_id}",
        "publishedAt": published_at,
        "liveBroadcastContent": live,
        "thumbnails": {
            "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
            "high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"},
        },
    }
    if channel_id is not None:
        snippet["channelId"] = channel_id
    return {
        "id": video_id,
        "snippet": snippet,
        "contentDetails": {"duration": duration},
        "statistics": {"viewCount": views},
    }


@pytest.fixture
def tmp_db(tmp_path):
    """Create a temporary SQLite database with the full schema."""
    db_path = str(tmp_path / "test.db")
    conn = init_database(db_path)
    conn.close()
    return db_path


@pytest.fixture
def repo(tmp_db):
    """Create a Repository backed by the temp database."""
    r = Repository(tmp_db)
    yield r
    r.close()


@pytest.fixture
def fake_youtube():
    return FakeYouTubeClient()


@pytest.fixture
def detail():
    """Factory for videos-endpoint items."""
    return make_detail


@pytest.fixture
def app_config(tmp_db):
    return {
        "db_path": tmp_db,
        "youtube": {
            "api_key": "yt-test-key",
            "trusted_channel_id": TRUSTED_CHANNEL,
        },
        "gemini": {"api_key": "gemini-test-key"},
        "cron_secret": CRON_SECRET,
        "creator": {"name": "Sam", "instagram_handles": ["@sketchy_sam"]},
    }


@pytest.fixture
def flask_app(app_config, fake_youtube):
    """Flask test app whose channel sync talks to the fake YouTube client."""
    from creator_portfolio.web.app import create_app, get_channel_sync

    app = create_app(app_config)
    app.config["TESTING"] = True
    get_channel_sync(app).client = fake_youtube
    yield app
    repo = getattr(app, "_repo", None)
    if repo is not None:
        repo.close()


@pytest.fixture
def client(flask_app):
    """Flask test client."""
    return flask_app.test_client()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {CRON_SECRET}"}


@pytest.fixture
def trusted_channel():
    return TRUSTED_CHANNEL


@pytest.fixture
def llm():
    """Factory: ``llm(resp1, resp2, ...)`` builds a scripted generative client."""
    return FakeGenerativeClient


@pytest.fixture
def fake_scraper():
    return FakeScraper()
