"""Tests for the Repository class: videos, reel analyses, sync log, profile."""
from __future__ import annotations

import sqlite3
import threading

import pytest

from creator_portfolio.database.models import (
    AIAnalysis,
    Competitor,
    InstagramPost,
    Profile,
    ReelAnalysis,
    VideoRecord,
)


def _video(video_id, published_at="2024-01-01T00:00:00Z", channel_id="UC_trusted123"):
    return VideoRecord(
        video_id=video_id,
        title=f"Video {video_id}",
        channel_id=channel_id,
        url=f"https://www.youtube.com/watch?v={video_id}",
        published_at=published_at,
        duration="PT5M",
        is_video=True,
    )


def _analysis(url="https://www.instagram.com/reel/ABC123/", topic="Art"):
    return ReelAnalysis(
        reel_url=url,
        caption="Sketching #art",
        hashtags=["art"],
        creator_username="sketchy_sam",
        thumbnail_url="https://cdn.example.com/t.jpg",
        ai_analysis=AIAnalysis(topic=topic, keywords=["sketch"], virality_score=7),
        competitors=[Competitor(username="other_artist", reason="Also sketches")],
    )


class TestVideos:
    def test_replace_videos_stores_all(self, repo):
        count = repo.replace_videos([_video("a"), _video("b")])
        assert count == 2
        assert repo.count_videos() == 2

    def test_replace_never_merges(self, repo):
        repo.replace_videos([_video("a"), _video("b"), _video("c")])
        repo.replace_videos([_video("d")])

        stored = repo.get_videos()
        assert [v.video_id for v in stored] == ["d"]

    def test_replace_with_empty_clears(self, repo):
        repo.replace_videos([_video("a")])
        assert repo.replace_videos([]) == 0
        assert repo.count_videos() == 0

    def test_get_videos_newest_first(self, repo):
        repo.replace_videos([
            _video("old", "2023-01-01T00:00:00Z"),
            _video("new", "2024-06-01T00:00:00Z"),
            _video("mid", "2024-01-01T00:00:00Z"),
        ])
        assert [v.video_id for v in repo.get_videos()] == ["new", "mid", "old"]

    def test_get_videos_limit(self, repo):
        repo.replace_videos([_video(str(i), f"2024-01-{i + 1:02d}T00:00:00Z") for i in range(5)])
        assert len(repo.get_videos(limit=3)) == 3

    def test_flags_round_trip_as_bools(self, repo):
        repo.replace_videos([_video("a")])
        video = repo.get_videos()[0]
        assert video.is_video is True
        assert video.is_short is False
        assert video.is_live is False


class TestReelAnalyses:
    def test_get_missing(self, repo):
        assert repo.get_reel_analysis("https://www.instagram.com/reel/none/") is None

    def test_upsert_creates(self, repo):
        stored = repo.upsert_reel_analysis(_analysis())
        assert stored.id is not None
        assert stored.created_at
        assert stored.ai_analysis.topic == "Art"
        assert stored.ai_analysis.virality_score == 7
        assert stored.competitors[0].username == "other_artist"
        assert stored.hashtags == ["art"]

    def test_upsert_overwrites_keeps_created_at(self, repo):
        first = repo.upsert_reel_analysis(_analysis(topic="Art"))
        second = repo.upsert_reel_analysis(_analysis(topic="Drawing"))

        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.ai_analysis.topic == "Drawing"
        assert len(repo.get_reel_analyses()) == 1

    def test_list_analyses(self, repo):
        repo.upsert_reel_analysis(_analysis("https://www.instagram.com/reel/A/"))
        repo.upsert_reel_analysis(_analysis("https://www.instagram.com/reel/B/"))
        analyses = repo.get_reel_analyses()
        assert [a.reel_url for a in analyses] == [
            "https://www.instagram.com/reel/B/",
            "https://www.instagram.com/reel/A/",
        ]

    def test_concurrent_upserts_leave_one_row(self, repo):
        errors = []

        def worker(topic):
            try:
                repo.upsert_reel_analysis(_analysis(topic=topic))
            except Exception as e:  # pragma: no cover - surfaced below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(f"T{i}",)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(repo.get_reel_analyses()) == 1


def _post(post_id="main-ABC", timestamp="2024-01-01T00:00:00.000Z", url=None):
    return InstagramPost(
        post_id=post_id,
        post_url=url or f"https://www.instagram.com/p/{post_id.split('-', 1)[1]}/",
        account_type=post_id.split("-", 1)[0],
        timestamp=timestamp,
    )


class TestInstagramPosts:
    def test_save_and_list_newest_first(self, repo):
        assert repo.save_instagram_post(_post("main-OLD", "2024-01-01T00:00:00.000Z")) is True
        assert repo.save_instagram_post(_post("art-NEW", "2024-02-01T00:00:00.000Z")) is True

        posts = repo.get_instagram_posts()
        assert [p.post_id for p in posts] == ["art-NEW", "main-OLD"]
        assert posts[0].account_type == "art"

    def test_existing_post_not_overwritten(self, repo):
        repo.save_instagram_post(_post("main-ABC", "2024-01-01T00:00:00.000Z"))
        added = repo.save_instagram_post(
            _post("main-ABC", "2025-01-01T00:00:00.000Z", url="https://www.instagram.com/p/CHANGED/")
        )

        assert added is False
        [post] = repo.get_instagram_posts()
        assert post.timestamp == "2024-01-01T00:00:00.000Z"
        assert post.post_url == "https://www.instagram.com/p/ABC/"

    def test_unknown_account_rejected(self, repo):
        with pytest.raises(sqlite3.IntegrityError):
            repo.save_instagram_post(_post("tiktok-ABC"))


class TestSyncLog:
    def test_add_and_list_newest_first(self, repo):
        repo.add_sync_log("youtube", "success", "first")
        repo.add_sync_log("reel", "error", "second", {"reel_url": "x"})

        logs = repo.get_sync_logs()
        assert [entry.message for entry in logs] == ["second", "first"]
        assert logs[0].data == {"reel_url": "x"}
        assert logs[1].data is None

    def test_filter_by_type(self, repo):
        repo.add_sync_log("youtube", "success", "yt")
        repo.add_sync_log("profile", "success", "pr")
        logs = repo.get_sync_logs(log_type="profile")
        assert [entry.message for entry in logs] == ["pr"]

    def test_instagram_type_accepted(self, repo):
        repo.add_sync_log("instagram", "success", "Synced 0 Instagram posts from config")
        assert repo.get_sync_logs(log_type="instagram")[0].type == "instagram"

    def test_rejects_unknown_type(self, repo):
        with pytest.raises(ValueError):
            repo.add_sync_log("tiktok", "success", "nope")

    def test_rejects_unknown_status(self, repo):
        with pytest.raises(ValueError):
            repo.add_sync_log("youtube", "partial", "nope")


class TestProfile:
    def test_empty(self, repo):
        assert repo.get_profile() is None

    def test_save_and_update(self, repo):
        repo.save_profile(Profile(bio="b1", tagline="t1", skills=["art"], personality="p"))
        updated = repo.save_profile(Profile(bio="b2", tagline="t2", skills=["x", "y"]))

        assert updated.bio == "b2"
        assert updated.skills == ["x", "y"]
        assert updated.generated_at
        count = repo.conn.execute("SELECT COUNT(*) AS cnt FROM profile").fetchone()["cnt"]
        assert count == 1


class TestStats:
    def test_stats(self, repo):
        repo.replace_videos([_video("a")])
        repo.add_sync_log("youtube", "success", "Synced 1 videos")
        stats = repo.get_stats()

        assert stats["videos"] == 1
        assert stats["reel_analyses"] == 0
        assert stats["instagram_posts"] == 0
        assert stats["sync_logs"] == 1
        assert stats["last_sync"]["youtube"]["status"] == "success"
        assert "reel" not in stats["last_sync"]
