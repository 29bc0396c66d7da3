from __future__ import annotations

"""Status API route."""

from flask import Blueprint, jsonify, current_app

from ..app import get_repo, get_settings

status_bp = Blueprint("status", __name__)


@status_bp.route("/status", methods=["GET"])
def get_status():
    """Stored counts and the latest run of each pipeline."""
    settings = get_settings(current_app)
    stats = get_repo(current_app).get_stats()
    return jsonify({
        "trusted_channel_id": settings.trusted_channel_id,
        "reel_analysis_enabled": bool(settings.gemini_api_key),
        "stats": stats,
    })
