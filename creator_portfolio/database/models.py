from __future__ import annotations

import json
from dataclasses import dataclass, field, asdict
from typing import Optional


def _loads(value, default):
    if value is None or value == "":
        return default
    if isinstance(value, (list, dict)):
        return value
    try:
        return json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return default


@dataclass
class VideoRecord:
    video_id: str
    title: str
    channel_id: str
    url: str
    description: str = ""
    thumbnail_url: str = ""
    published_at: Optional[str] = None
    view_count: str = "0"
    duration: str = ""
    live_broadcast_content: str = "none"
    is_short: bool = False
    is_video: bool = False
    is_live: bool = False

    @classmethod
    def from_row(cls, row) -> "VideoRecord":
        row = dict(row)
        return cls(
            video_id=row["video_id"],
            title=row["title"],
            channel_id=row["channel_id"],
            url=row["url"],
            description=row.get("description") or "",
            thumbnail_url=row.get("thumbnail_url") or "",
            published_at=row.get("published_at"),
            view_count=row.get("view_count") or "0",
            duration=row.get("duration") or "",
            live_broadcast_content=row.get("live_broadcast_content") or "none",
            is_short=bool(row.get("is_short")),
            is_video=bool(row.get("is_video")),
            is_live=bool(row.get("is_live")),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AIAnalysis:
    topic: str = "Unknown"
    language: str = "Unknown"
    tone: str = "Unknown"
    keywords: list[str] = field(default_factory=list)
    audience: str = "General"
    virality_score: int = 5
    improvement_ideas: list[str] = field(default_factory=list)
    recommended_hashtags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Competitor:
    username: str
    reel_url: str = ""
    reason: str = "Similar content"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ReelAnalysis:
    reel_url: str
    caption: str
    hashtags: list[str]
    creator_username: str
    thumbnail_url: str
    ai_analysis: AIAnalysis
    competitors: list[Competitor] = field(default_factory=list)
    audio_name: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row) -> "ReelAnalysis":
        row = dict(row)
        ai = _loads(row.get("ai_analysis"), {})
        competitors = _loads(row.get("competitors"), [])
        return cls(
            id=row.get("id"),
            reel_url=row["reel_url"],
            caption=row.get("caption") or "",
            hashtags=_loads(row.get("hashtags"), []),
            creator_username=row.get("creator_username") or "unknown",
            thumbnail_url=row.get("thumbnail_url") or "",
            audio_name=row.get("audio_name"),
            ai_analysis=AIAnalysis(**ai),
            competitors=[Competitor(**c) for c in competitors],
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SyncLogEntry:
    type: str
    status: str
    message: str
    timestamp: Optional[str] = None
    data: Optional[dict] = None
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row) -> "SyncLogEntry":
        row = dict(row)
        return cls(
            id=row.get("id"),
            type=row["type"],
            status=row["status"],
            message=row["message"],
            timestamp=row.get("timestamp"),
            data=_loads(row.get("data"), None),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Profile:
    bio: str
    tagline: str
    skills: list[str] = field(default_factory=list)
    personality: str = ""
    generated_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Profile":
        row = dict(row)
        return cls(
            bio=row.get("bio") or "",
            tagline=row.get("tagline") or "",
            skills=_loads(row.get("skills"), []),
            personality=row.get("personality") or "",
            generated_at=row.get("generated_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class InstagramPost:
    """A curated Instagram post shown in the portfolio feed."""

    post_id: str
    post_url: str
    account_type: str
    timestamp: str

    @classmethod
    def from_row(cls, row) -> "InstagramPost":
        return cls(
            post_id=row["post_id"],
            post_url=row["post_url"],
            account_type=row["account_type"],
            timestamp=row["timestamp"],
        )

    def to_dict(self) -> dict:
        return asdict(self)
