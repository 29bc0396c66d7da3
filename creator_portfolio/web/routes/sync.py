from __future__ import annotations

"""Sync triggers (manual and cron) and the audit log."""

import logging

from flask import Blueprint, jsonify, current_app, request

from ...database.repository import SYNC_TYPES
from ..app import get_repo, get_ingestion_pipeline, get_profile_writer, get_instagram_feed
from ..guards import require_cron_secret, limit_arg

logger = logging.getLogger(__name__)

sync_bp = Blueprint("sync", __name__)


def _run_youtube_sync(trigger: str):
    result = get_ingestion_pipeline(current_app).run(trigger)
    return jsonify({
        "success": True,
        "count": result["count"],
        "message": result["message"],
        "debug": result["debug"],
    })


@sync_bp.route("/sync/youtube", methods=["POST"])
@require_cron_secret
def sync_youtube():
    return _run_youtube_sync("manual")


@sync_bp.route("/cron/youtube", methods=["GET"])
@require_cron_secret
def cron_youtube():
    return _run_youtube_sync("cron")


@sync_bp.route("/sync/instagram", methods=["POST"])
@require_cron_secret
def sync_instagram():
    result = get_instagram_feed(current_app).sync("manual")
    return jsonify({"success": True, "count": result["count"], "added": result["added"]})


def _run_profile_sync(trigger: str):
    profile = get_profile_writer(current_app).run(trigger)
    return jsonify({"success": True, "profile": profile.to_dict()})


@sync_bp.route("/sync/profile", methods=["POST"])
@require_cron_secret
def sync_profile():
    return _run_profile_sync("manual")


@sync_bp.route("/cron/profile", methods=["GET"])
@require_cron_secret
def cron_profile():
    return _run_profile_sync("cron")


@sync_bp.route("/sync/logs", methods=["GET"])
@require_cron_secret
def sync_logs():
    """Most recent audit entries. Optional ?type=youtube|instagram|reel|profile&limit=N."""
    log_type = request.args.get("type")
    if log_type and log_type not in SYNC_TYPES:
        return jsonify({"error": f"Unknown log type: {log_type}"}), 400
    logs = get_repo(current_app).get_sync_logs(limit=limit_arg(100), log_type=log_type)
    return jsonify({"logs": [entry.to_dict() for entry in logs]})
