from __future__ import annotations

"""Public Instagram post feed."""

from flask import Blueprint, jsonify, current_app

from ..app import get_instagram_feed

instagram_bp = Blueprint("instagram", __name__)


@instagram_bp.route("/instagram", methods=["GET"])
def list_posts():
    posts = get_instagram_feed(current_app).posts()
    return jsonify({"posts": [p.to_dict() for p in posts]})
