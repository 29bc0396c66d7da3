from __future__ import annotations

"""Reel analyzer API routes."""

import logging

from flask import Blueprint, jsonify, current_app, request

from ...errors import ValidationError
from ..app import get_repo, get_reel_pipeline
from ..guards import require_cron_secret, limit_arg

logger = logging.getLogger(__name__)

reels_bp = Blueprint("reels", __name__)


@reels_bp.route("/admin/analyze-reel", methods=["POST"])
@require_cron_secret
def analyze_reel():
    """Analyze a reel, or return the cached analysis.

    Body: {"reel_url": str}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    reel_url = data.get("reel_url", data.get("reelUrl"))
    if not isinstance(reel_url, str) or not reel_url.strip():
        raise ValidationError("reel_url is required")

    analysis, cached = get_reel_pipeline(current_app).get_or_create_analysis(reel_url)
    return jsonify({
        "success": True,
        "analysis": analysis.to_dict(),
        "cached": cached,
    })


@reels_bp.route("/admin/reel-analyses", methods=["GET"])
@require_cron_secret
def list_analyses():
    analyses = get_repo(current_app).get_reel_analyses(limit=limit_arg(50))
    return jsonify({"analyses": [a.to_dict() for a in analyses]})
