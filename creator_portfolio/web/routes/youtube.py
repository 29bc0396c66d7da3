from __future__ import annotations

"""Public video feed and the raw ingestion debug view."""

import logging

from flask import Blueprint, jsonify, current_app

from ...errors import ChannelIntegrityError
from ...ingestion.channel_sync import filter_trusted
from ..app import get_repo, get_settings, get_channel_sync
from ..guards import require_cron_secret

logger = logging.getLogger(__name__)

youtube_bp = Blueprint("youtube", __name__)


@youtube_bp.route("/youtube", methods=["GET"])
def list_videos():
    """Stored videos, re-validated against the trusted channel.

    Falls back to a fresh (unpersisted) fetch when nothing stored survives.
    """
    settings = get_settings(current_app)
    repo = get_repo(current_app)

    stored = repo.get_videos(limit=settings.feed_limit)
    if stored:
        verified = filter_trusted(stored, settings.trusted_channel_id)
        if len(verified) != len(stored):
            logger.warning(
                f"Rejected {len(stored) - len(verified)} stored videos that "
                f"failed channel validation"
            )
        if verified:
            return jsonify({
                "videos": [v.to_dict() for v in verified],
                "source": "database",
            })
        logger.warning("All stored videos failed validation, fetching fresh from API")

    result = get_channel_sync(current_app).fetch_verified_videos()
    videos = filter_trusted(result.videos, settings.trusted_channel_id)
    return jsonify({
        "videos": [v.to_dict() for v in videos[:settings.feed_limit]],
        "source": "api",
        "message": result.message,
    })


@youtube_bp.route("/debug/youtube", methods=["GET"])
@require_cron_secret
def debug_fetch():
    """Run a fetch without persisting and return every intermediate count."""
    try:
        result = get_channel_sync(current_app).fetch_verified_videos()
    except ChannelIntegrityError as e:
        return jsonify({
            "error": e.message,
            "parsed_videos": [],
            "video_count": 0,
            "validation_passed": False,
            "debug": e.debug,
        }), 500

    debug = result.debug
    return jsonify({
        "channel_id": debug.get("channel_id"),
        "videos_before_validation": debug.get("videos_before_validation", 0),
        "videos_after_validation": debug.get("videos_after_validation", 0),
        "discarded_count": debug.get("rejected", 0),
        "parsed_videos": [v.to_dict() for v in result.videos],
        "video_count": len(result.videos),
        "validation_passed": debug.get("validation_passed", True),
        "error": result.message,
        "debug": debug,
    })
