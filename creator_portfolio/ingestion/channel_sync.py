from __future__ import annotations

"""Trusted-channel video sync: search -> details -> hard filter -> classify.

Only the channelId returned by the videos (details) endpoint decides whether a
video belongs to the creator. Titles, descriptions, hashtags and thumbnails are
never consulted."""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..database.models import VideoRecord
from ..errors import ChannelIntegrityError
from .youtube_api import YouTubeDataClient

logger = logging.getLogger(__name__)

NO_VIDEOS_MESSAGE = "No verified videos found."
INTEGRITY_MESSAGE = "Blocked: Non-authorized channel content detected."

SHORT_MAX_SECONDS = 60
DESCRIPTION_MAX_CHARS = 200

_DURATION_RE = re.compile(
    r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$"
)


def parse_iso_duration(value: Optional[str]) -> int:
    """ISO-8601 duration ("PT1H2M10S", "P1DT2H") to whole seconds. 0 if unparsable."""
    if not value:
        return 0
    match = _DURATION_RE.match(value.strip().upper())
    if not match:
        return 0
    days, hours, minutes, seconds = match.groups()
    return (
        int(days or 0) * 86400
        + int(hours or 0) * 3600
        + int(minutes or 0) * 60
        + int(float(seconds or 0))
    )


def classify_duration(seconds: int, live_state: Optional[str]) -> tuple[bool, bool, bool]:
    """Return (is_short, is_video, is_live)."""
    is_short = 0 < seconds <= SHORT_MAX_SECONDS
    is_video = seconds > SHORT_MAX_SECONDS
    is_live = live_state == "live"
    return is_short, is_video, is_live


def is_trusted(channel_id: Optional[str], trusted_channel_id: str) -> bool:
    return bool(channel_id) and channel_id == trusted_channel_id


def filter_trusted(
    videos: Iterable[VideoRecord], trusted_channel_id: str
) -> list[VideoRecord]:
    """Re-check records (e.g. loaded from storage) against the trusted id."""
    accepted = []
    for video in videos:
        if is_trusted(video.channel_id, trusted_channel_id):
            accepted.append(video)
        else:
            logger.warning(
                f"Rejected stored video {video.video_id}: channelId "
                f"({video.channel_id or 'MISSING'}) is not the trusted channel"
            )
    return accepted


def _pick_thumbnail(snippet: dict) -> str:
    thumbs = snippet.get("thumbnails") or {}
    for size in ("high", "medium", "default"):
        url = (thumbs.get(size) or {}).get("url")
        if url:
            return url
    return ""


def build_video_record(item: dict) -> VideoRecord:
    """Turn one videos-endpoint item into a classified VideoRecord."""
    snippet = item.get("snippet") or {}
    duration = (item.get("contentDetails") or {}).get("duration") or ""
    live_state = snippet.get("liveBroadcastContent") or "none"
    is_short, is_video, is_live = classify_duration(
        parse_iso_duration(duration), live_state
    )
    video_id = item["id"]
    return VideoRecord(
        video_id=video_id,
        title=snippet.get("title", ""),
        description=(snippet.get("description") or "")[:DESCRIPTION_MAX_CHARS],
        thumbnail_url=_pick_thumbnail(snippet),
        published_at=snippet.get("publishedAt"),
        view_count=str((item.get("statistics") or {}).get("viewCount", "0")),
        duration=duration,
        url=f"https://www.youtube.com/watch?v={video_id}",
        channel_id=snippet.get("channelId", ""),
        live_broadcast_content=live_state,
        is_short=is_short,
        is_video=is_video,
        is_live=is_live,
    )


@dataclass
class FetchResult:
    videos: list[VideoRecord] = field(default_factory=list)
    debug: dict = field(default_factory=dict)
    message: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.videos


class ChannelSync:
    """Fetches and verifies the latest uploads of one trusted channel."""

    def __init__(
        self,
        client: YouTubeDataClient,
        trusted_channel_id: str,
        max_results: int = 12,
    ):
        if not trusted_channel_id:
            raise ValueError("trusted_channel_id is required")
        self.client = client
        self.trusted_channel_id = trusted_channel_id
        self.max_results = max_results

    def fetch_verified_videos(self) -> FetchResult:
        """Run the full fetch. Raises ChannelIntegrityError if every detail
        record fails the trusted-channel check; upstream errors propagate."""
        debug = {"channel_id": self.trusted_channel_id, "video_count": 0}

        # Step 1: search, filtered server-side by channel
        logger.info(f"Searching latest {self.max_results} videos for {self.trusted_channel_id}")
        search_data = self.client.search_channel_videos(
            self.trusted_channel_id, self.max_results
        )
        debug["search_api_response"] = search_data
        items = search_data.get("items") or []
        logger.info(f"Search returned {len(items)} items")
        if not items:
            logger.warning("No videos in search response")
            return FetchResult(debug=debug, message=NO_VIDEOS_MESSAGE)

        # Step 2: ids
        video_ids = [
            (item.get("id") or {}).get("videoId")
            for item in items
            if isinstance(item.get("id"), dict)
        ]
        video_ids = [vid for vid in video_ids if vid]
        if not video_ids:
            logger.warning("No video ids found in search results")
            return FetchResult(debug=debug, message=NO_VIDEOS_MESSAGE)

        # Step 3: details
        details_data = self.client.get_video_details(video_ids)
        debug["videos_api_response"] = details_data
        details = details_data.get("items") or []
        debug["videos_before_validation"] = len(details)
        logger.info(f"Fetched details for {len(details)} of {len(video_ids)} videos")
        if not details:
            logger.warning("No video details returned")
            return FetchResult(debug=debug, message=NO_VIDEOS_MESSAGE)

        # Step 4: hard filter on snippet.channelId, then classify
        videos: list[VideoRecord] = []
        rejected: list[dict] = []
        for item in details:
            video_id = item.get("id", "")
            observed = (item.get("snippet") or {}).get("channelId")
            if not observed:
                reason = "Video has no channelId field"
            elif observed != self.trusted_channel_id:
                reason = (
                    f"channelId ({observed}) does not match trusted channel ID "
                    f"({self.trusted_channel_id})"
                )
            else:
                videos.append(build_video_record(item))
                continue

            logger.warning(f"REJECTED video {video_id} (channelId: {observed or 'MISSING'}): {reason}")
            rejected.append({
                "video_id": video_id,
                "channel_id": observed or "MISSING",
                "reason": reason,
            })

        debug.update({
            "videos_after_validation": len(videos),
            "accepted": len(videos),
            "rejected": len(rejected),
            "rejected_videos": rejected,
            "validation_passed": not rejected,
            "video_count": len(videos),
        })

        if not videos:
            logger.error(
                f"All {len(details)} fetched videos failed channel validation; "
                f"only {self.trusted_channel_id} is allowed"
            )
            raise ChannelIntegrityError(INTEGRITY_MESSAGE, debug=debug)

        logger.info(
            f"Verified {len(videos)} videos ({len(rejected)} rejected) "
            f"for {self.trusted_channel_id}"
        )
        return FetchResult(videos=videos, debug=debug)
