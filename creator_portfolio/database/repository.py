from __future__ import annotations

import json
import sqlite3
import logging
import threading
from typing import Optional

from .connection import init_database
from .models import InstagramPost, Profile, ReelAnalysis, SyncLogEntry, VideoRecord

logger = logging.getLogger(__name__)

SYNC_TYPES = {"youtube", "instagram", "reel", "profile"}
SYNC_STATUSES = {"success", "error"}

_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"


class Repository:
    """All database reads and writes. Sole mutator of stored state.

    One connection is opened lazily and reused for the life of the
    repository; writes are serialized with a re-entrant lock so a single
    instance can be shared by concurrent request handlers.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def conn(self) -> sqlite3.Connection:
        with self._lock:
            if self._conn is None:
                self._conn = init_database(self.db_path)
            return self._conn

    def close(self):
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    # ------------------------------------------------------------------
    # YouTube videos
    # ------------------------------------------------------------------

    def replace_videos(self, videos: list[VideoRecord]) -> int:
        """Replace the whole stored video set in one transaction.

        Never merges with the previous set. Returns the number stored.
        """
        rows = [
            (
                v.video_id, v.channel_id, v.title, v.description,
                v.thumbnail_url, v.published_at, v.view_count, v.duration,
                v.url, v.live_broadcast_content,
                int(v.is_short), int(v.is_video), int(v.is_live),
            )
            for v in videos
        ]
        with self._lock, self.conn:
            self.conn.execute("DELETE FROM youtube_videos")
            self.conn.executemany(
                """INSERT OR REPLACE INTO youtube_videos
                   (video_id, channel_id, title, description, thumbnail_url,
                    published_at, view_count, duration, url,
                    live_broadcast_content, is_short, is_video, is_live)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                rows,
            )
        logger.info(f"Stored {len(rows)} videos (previous set replaced)")
        return len(rows)

    def get_videos(self, limit: Optional[int] = None) -> list[VideoRecord]:
        sql = "SELECT * FROM youtube_videos ORDER BY published_at DESC, id"
        params: list = []
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        with self._lock:
            rows = self.conn.execute(sql, params).fetchall()
        return [VideoRecord.from_row(r) for r in rows]

    def count_videos(self) -> int:
        with self._lock:
            row = self.conn.execute(
                "SELECT COUNT(*) as cnt FROM youtube_videos"
            ).fetchone()
        return row["cnt"]

    # ------------------------------------------------------------------
    # Reel analyses
    # ------------------------------------------------------------------

    def get_reel_analysis(self, reel_url: str) -> Optional[ReelAnalysis]:
        with self._lock:
            row = self.conn.execute(
                "SELECT * FROM reel_analyses WHERE reel_url = ?", (reel_url,)
            ).fetchone()
        return ReelAnalysis.from_row(row) if row else None

    def upsert_reel_analysis(self, analysis: ReelAnalysis) -> ReelAnalysis:
        """Insert or overwrite the analysis for its URL, keeping created_at.

        Concurrent writers for the same URL resolve as last-write-wins.
        """
        params = {
            "reel_url": analysis.reel_url,
            "caption": analysis.caption,
            "hashtags": json.dumps(analysis.hashtags),
            "creator_username": analysis.creator_username,
            "thumbnail_url": analysis.thumbnail_url,
            "audio_name": analysis.audio_name,
            "ai_analysis": json.dumps(analysis.ai_analysis.to_dict()),
            "competitors": json.dumps([c.to_dict() for c in analysis.competitors]),
        }
        with self._lock, self.conn:
            self.conn.execute(
                f"""INSERT INTO reel_analyses
                       (reel_url, caption, hashtags, creator_username,
                        thumbnail_url, audio_name, ai_analysis, competitors)
                   VALUES (:reel_url, :caption, :hashtags, :creator_username,
                           :thumbnail_url, :audio_name, :ai_analysis, :competitors)
                   ON CONFLICT(reel_url) DO UPDATE SET
                       caption = excluded.caption,
                       hashtags = excluded.hashtags,
                       creator_username = excluded.creator_username,
                       thumbnail_url = excluded.thumbnail_url,
                       audio_name = excluded.audio_name,
                       ai_analysis = excluded.ai_analysis,
                       competitors = excluded.competitors,
                       updated_at = {_NOW}""",
                params,
            )
        return self.get_reel_analysis(analysis.reel_url)

    def get_reel_analyses(self, limit: int = 50) -> list[ReelAnalysis]:
        with self._lock:
            rows = self.conn.execute(
                "SELECT * FROM reel_analyses ORDER BY created_at DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [ReelAnalysis.from_row(r) for r in rows]

    # ------------------------------------------------------------------
    # Instagram posts
    # ------------------------------------------------------------------

    def save_instagram_post(self, post: InstagramPost) -> bool:
        """Store the post unless its post_id is already present.

        Existing rows are never touched. Returns True when a row was added.
        """
        with self._lock, self.conn:
            cur = self.conn.execute(
                """INSERT INTO instagram_posts (post_id, post_url, account_type, timestamp)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(post_id) DO NOTHING""",
                (post.post_id, post.post_url, post.account_type, post.timestamp),
            )
        return cur.rowcount == 1

    def get_instagram_posts(self) -> list[InstagramPost]:
        with self._lock:
            rows = self.conn.execute(
                "SELECT * FROM instagram_posts ORDER BY timestamp DESC, id"
            ).fetchall()
        return [InstagramPost.from_row(r) for r in rows]

    # ------------------------------------------------------------------
    # Sync log
    # ------------------------------------------------------------------

    def add_sync_log(
        self,
        log_type: str,
        status: str,
        message: str,
        data: Optional[dict] = None,
    ) -> int:
        if log_type not in SYNC_TYPES:
            raise ValueError(f"Unknown sync log type: {log_type}")
        if status not in SYNC_STATUSES:
            raise ValueError(f"Unknown sync log status: {status}")
        with self._lock, self.conn:
            cur = self.conn.execute(
                "INSERT INTO sync_logs (type, status, message, data) VALUES (?, ?, ?, ?)",
                (
                    log_type, status, message,
                    json.dumps(data, default=str) if data is not None else None,
                ),
            )
        return cur.lastrowid

    def get_sync_logs(
        self, limit: int = 50, log_type: Optional[str] = None
    ) -> list[SyncLogEntry]:
        sql = "SELECT * FROM sync_logs"
        params: list = []
        if log_type:
            sql += " WHERE type = ?"
            params.append(log_type)
        sql += " ORDER BY timestamp DESC, id DESC LIMIT ?"
        params.append(limit)
        with self._lock:
            rows = self.conn.execute(sql, params).fetchall()
        return [SyncLogEntry.from_row(r) for r in rows]

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def get_profile(self) -> Optional[Profile]:
        with self._lock:
            row = self.conn.execute("SELECT * FROM profile WHERE id = 1").fetchone()
        return Profile.from_row(row) if row else None

    def save_profile(self, profile: Profile) -> Profile:
        """Upsert the single profile row; generated_at tracks the latest run."""
        with self._lock, self.conn:
            self.conn.execute(
                f"""INSERT INTO profile (id, bio, tagline, skills, personality)
                   VALUES (1, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                       bio = excluded.bio,
                       tagline = excluded.tagline,
                       skills = excluded.skills,
                       personality = excluded.personality,
                       generated_at = {_NOW},
                       updated_at = {_NOW}""",
                (profile.bio, profile.tagline, json.dumps(profile.skills),
                 profile.personality),
            )
        return self.get_profile()

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_stats(self) -> dict:
        stats = {}
        with self._lock:
            stats["videos"] = self.count_videos()
            row = self.conn.execute(
                "SELECT COUNT(*) as cnt FROM reel_analyses"
            ).fetchone()
            stats["reel_analyses"] = row["cnt"]
            row = self.conn.execute(
                "SELECT COUNT(*) as cnt FROM instagram_posts"
            ).fetchone()
            stats["instagram_posts"] = row["cnt"]
            row = self.conn.execute("SELECT COUNT(*) as cnt FROM sync_logs").fetchone()
            stats["sync_logs"] = row["cnt"]

            last_sync = {}
            for log_type in sorted(SYNC_TYPES):
                entries = self.get_sync_logs(limit=1, log_type=log_type)
                if entries:
                    last_sync[log_type] = {
                        "status": entries[0].status,
                        "message": entries[0].message,
                        "timestamp": entries[0].timestamp,
                    }
            stats["last_sync"] = last_sync
        return stats
