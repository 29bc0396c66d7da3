from __future__ import annotations

import logging
from typing import Optional

import requests

from ..errors import YouTubeAPIError

logger = logging.getLogger(__name__)

API_BASE = "https://www.googleapis.com/youtube/v3"
SEARCH_URL = f"{API_BASE}/search"
VIDEOS_URL = f"{API_BASE}/videos"


class YouTubeDataClient:
    """Thin wrapper over the YouTube Data API v3 search and videos endpoints.

    Returns the raw JSON payloads; interpretation happens in ChannelSync.
    Nothing here retries.
    """

    def __init__(self, api_key: str, timeout: float = 15.0):
        self.api_key = api_key
        self.timeout = timeout

    def search_channel_videos(self, channel_id: str, max_results: int = 12) -> dict:
        """Most recent uploads of one channel, newest first."""
        params = {
            "part": "snippet",
            "channelId": channel_id,
            "order": "date",
            "maxResults": max_results,
            "type": "video",
        }
        return self._get(SEARCH_URL, params, "search")

    def get_video_details(self, video_ids: list[str]) -> dict:
        """Bulk details (snippet, duration, statistics) for the given ids."""
        params = {
            "part": "snippet,contentDetails,statistics",
            "id": ",".join(video_ids),
        }
        return self._get(VIDEOS_URL, params, "videos")

    def _get(self, url: str, params: dict, endpoint: str) -> dict:
        logger.debug(f"GET {url} params={params}")
        try:
            resp = requests.get(
                url, params={**params, "key": self.api_key}, timeout=self.timeout
            )
        except requests.Timeout as e:
            raise YouTubeAPIError(
                f"YouTube {endpoint} API timed out after {self.timeout:.0f}s",
                category="transport",
            ) from e
        except requests.RequestException as e:
            raise YouTubeAPIError(
                f"YouTube {endpoint} API request failed: {type(e).__name__}",
                category="transport",
            ) from e

        if not resp.ok:
            payload = _safe_json(resp)
            error = payload.get("error") if payload else None
            upstream_message = error.get("message") if isinstance(error, dict) else error
            message = upstream_message or resp.reason or f"HTTP {resp.status_code}"
            logger.error(
                f"YouTube {endpoint} API failed: {resp.status_code} {message}"
            )
            raise YouTubeAPIError(
                f"Failed to fetch from YouTube {endpoint} API: {message}",
                status_code=resp.status_code,
                payload=payload,
            )

        return resp.json()


def _safe_json(resp) -> Optional[dict]:
    try:
        data = resp.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
