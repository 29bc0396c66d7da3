"""Tests for the YouTube sync pipeline: persistence and audit logging."""
from __future__ import annotations

import pytest

from creator_portfolio.errors import ChannelIntegrityError, YouTubeAPIError
from creator_portfolio.ingestion.channel_sync import ChannelSync
from creator_portfolio.ingestion.pipeline import ChannelIngestionPipeline


@pytest.fixture
def pipeline(fake_youtube, trusted_channel, repo):
    return ChannelIngestionPipeline(ChannelSync(fake_youtube, trusted_channel), repo)


class TestRun:
    def test_success_replaces_and_logs(self, pipeline, fake_youtube, detail, repo):
        fake_youtube.serve(detail("a"), detail("b"))
        result = pipeline.run("cron")

        assert result["count"] == 2
        assert result["message"] == "Synced 2 videos"
        assert repo.count_videos() == 2

        log = repo.get_sync_logs(log_type="youtube")[0]
        assert log.status == "success"
        assert log.data["trigger"] == "cron"
        assert log.data["count"] == 2

    def test_second_sync_replaces_set(self, pipeline, fake_youtube, detail, repo):
        fake_youtube.serve(detail("a"), detail("b"), detail("c"))
        pipeline.run()
        fake_youtube.serve(detail("d"))
        pipeline.run()

        assert [v.video_id for v in repo.get_videos()] == ["d"]

    def test_only_trusted_persisted(self, pipeline, fake_youtube, detail, repo, trusted_channel):
        fake_youtube.serve(detail("a"), detail("b", channel_id="UC_intruder999"))
        result = pipeline.run()

        assert result["count"] == 1
        assert all(v.channel_id == trusted_channel for v in repo.get_videos())

    def test_empty_leaves_stored_set(self, pipeline, fake_youtube, detail, repo):
        fake_youtube.serve(detail("a"))
        pipeline.run()
        fake_youtube.serve()

        result = pipeline.run()

        assert result["count"] == 0
        assert result["message"] == "No verified videos found."
        assert [v.video_id for v in repo.get_videos()] == ["a"]
        log = repo.get_sync_logs(log_type="youtube")[0]
        assert log.status == "success"
        assert "left unchanged" in log.message

    def test_integrity_failure_logged_and_nothing_written(self, pipeline, fake_youtube, detail, repo):
        fake_youtube.serve(detail("a"))
        pipeline.run()
        fake_youtube.serve(detail("x", channel_id="UC_intruder999"))

        with pytest.raises(ChannelIntegrityError):
            pipeline.run()

        assert [v.video_id for v in repo.get_videos()] == ["a"]
        log = repo.get_sync_logs(log_type="youtube")[0]
        assert log.status == "error"
        assert log.data["category"] == "integrity"
        assert log.data["debug"]["rejected"] == 1

    def test_upstream_failure_logged(self, pipeline, fake_youtube, repo):
        fake_youtube.error = YouTubeAPIError("Failed to fetch from YouTube search API: boom")

        with pytest.raises(YouTubeAPIError):
            pipeline.run()

        log = repo.get_sync_logs()[0]
        assert log.type == "youtube"
        assert log.status == "error"
        assert "boom" in log.message
        assert repo.count_videos() == 0


class TestFetch:
    def test_fetch_does_not_persist(self, pipeline, fake_youtube, detail, repo):
        fake_youtube.serve(detail("a"))
        result = pipeline.fetch()

        assert len(result.videos) == 1
        assert repo.count_videos() == 0
        assert repo.get_sync_logs() == []
