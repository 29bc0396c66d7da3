from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from ..database.models import InstagramPost
from ..database.repository import Repository

logger = logging.getLogger(__name__)

ACCOUNT_TYPES = ("main", "art")

_POST_ID_RE = re.compile(r"instagram\.com/p/([A-Za-z0-9_-]+)")


def extract_post_id(url: str) -> Optional[str]:
    """Shortcode from an instagram.com/p/<id> URL, or None."""
    match = _POST_ID_RE.search(url or "")
    return match.group(1) if match else None


def _iso(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def configured_posts(
    main: Iterable[str],
    art: Iterable[str],
    now: Optional[datetime] = None,
) -> list[InstagramPost]:
    """Build feed entries from the configured URL lists, newest first.

    Entries are one day apart in list order, main account before art. A URL
    without a post id is skipped but still takes its slot in the sequence.
    """
    now = now or datetime.now(timezone.utc)
    posts = []
    slot = 0
    for account_type, urls in zip(ACCOUNT_TYPES, (main, art)):
        for url in urls:
            post_id = extract_post_id(url)
            if post_id:
                posts.append(InstagramPost(
                    post_id=f"{account_type}-{post_id}",
                    post_url=url,
                    account_type=account_type,
                    timestamp=_iso(now - timedelta(days=slot)),
                ))
            else:
                logger.warning(f"Skipping Instagram URL without a post id: {url}")
            slot += 1

    posts.sort(key=lambda p: p.timestamp, reverse=True)
    return posts


def merge_posts(
    configured: list[InstagramPost], stored: list[InstagramPost]
) -> list[InstagramPost]:
    """Stored posts replace configured ones with the same post_id in place;
    the rest are appended in stored order."""
    merged = list(configured)
    positions = {p.post_id: i for i, p in enumerate(merged)}
    for post in stored:
        if post.post_id in positions:
            merged[positions[post.post_id]] = post
        else:
            positions[post.post_id] = len(merged)
            merged.append(post)
    return merged


class InstagramFeed:
    """The curated post feed: configured URLs overlaid with stored entries."""

    def __init__(
        self,
        repo: Repository,
        main_posts: Iterable[str] = (),
        art_posts: Iterable[str] = (),
    ):
        self.repo = repo
        self.main_posts = list(main_posts)
        self.art_posts = list(art_posts)

    def posts(self) -> list[InstagramPost]:
        return merge_posts(
            configured_posts(self.main_posts, self.art_posts),
            self.repo.get_instagram_posts(),
        )

    def sync(self, trigger: str = "manual") -> dict:
        """Store configured posts not yet in the database. No network calls.

        Returns {"count", "added", "message"}.
        """
        posts = configured_posts(self.main_posts, self.art_posts)
        added = 0
        for post in posts:
            if self.repo.save_instagram_post(post):
                added += 1

        message = f"Synced {len(posts)} Instagram posts from config"
        self.repo.add_sync_log(
            "instagram", "success", message,
            {"trigger": trigger, "count": len(posts), "added": added},
        )
        logger.info(f"{message} ({added} new)")
        return {"count": len(posts), "added": added, "message": message}
