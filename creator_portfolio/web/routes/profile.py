from __future__ import annotations

"""Profile routes: public read and guarded manual edit."""

import logging

from flask import Blueprint, jsonify, current_app, request

from ...database.models import Profile
from ...errors import ValidationError
from ..app import get_repo
from ..guards import require_cron_secret

logger = logging.getLogger(__name__)

profile_bp = Blueprint("profile", __name__)

TEXT_FIELDS = ("bio", "tagline", "personality")


def parse_profile_body(data) -> Profile:
    """Check an edit body of {bio, tagline, skills: [str], personality}.

    Every field is required. Raises ValidationError listing all problems.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    problems = [f"{name} must be a string" for name in TEXT_FIELDS
                if not isinstance(data.get(name), str)]
    skills = data.get("skills")
    if not isinstance(skills, list) or not all(isinstance(s, str) for s in skills):
        problems.append("skills must be a list of strings")
    if problems:
        raise ValidationError("Validation error", details=problems)

    return Profile(
        bio=data["bio"],
        tagline=data["tagline"],
        skills=list(skills),
        personality=data["personality"],
    )


@profile_bp.route("/profile", methods=["GET"])
def get_profile():
    profile = get_repo(current_app).get_profile()
    return jsonify({"profile": profile.to_dict() if profile else None})


@profile_bp.route("/profile", methods=["PUT"])
@require_cron_secret
def update_profile():
    """Replace the stored profile text with a hand-edited version."""
    profile = parse_profile_body(request.get_json(silent=True))
    saved = get_repo(current_app).save_profile(profile)
    logger.info("Profile updated manually")
    return jsonify({"success": True, "profile": saved.to_dict()})
