from __future__ import annotations

import logging

from ..database.repository import Repository
from ..errors import PortfolioError
from .channel_sync import ChannelSync

logger = logging.getLogger(__name__)


class ChannelIngestionPipeline:
    """Orchestrates a channel sync run: fetch -> verify -> replace stored set -> audit.

    Every outcome is written to the sync log. Errors are re-raised unchanged
    after logging; nothing is persisted unless the fetch succeeded.
    """

    def __init__(self, channel_sync: ChannelSync, repo: Repository):
        self.channel_sync = channel_sync
        self.repo = repo

    def fetch(self):
        """Fetch and verify without touching storage (debug view)."""
        return self.channel_sync.fetch_verified_videos()

    def run(self, trigger: str = "manual") -> dict:
        """Returns {"count", "debug", "message"}."""
        logger.info(f"Starting YouTube sync ({trigger})")
        try:
            result = self.channel_sync.fetch_verified_videos()
        except PortfolioError as e:
            self.repo.add_sync_log(
                "youtube", "error", e.message,
                {"trigger": trigger, "category": e.category,
                 "debug": getattr(e, "debug", None)},
            )
            raise

        if result.is_empty:
            # Upstream had nothing: keep the stored set as it is
            self.repo.add_sync_log(
                "youtube", "success",
                f"{result.message} Stored videos left unchanged.",
                {"trigger": trigger, "count": 0, "debug": result.debug},
            )
            return {"count": 0, "debug": result.debug, "message": result.message}

        count = self.repo.replace_videos(result.videos)
        message = f"Synced {count} videos"
        self.repo.add_sync_log(
            "youtube", "success", message,
            {"trigger": trigger, "count": count, "debug": result.debug},
        )
        logger.info(message)
        return {"count": count, "debug": result.debug, "message": message}
