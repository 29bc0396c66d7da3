from __future__ import annotations

import functools
import hmac
import logging

from flask import current_app, jsonify, request

logger = logging.getLogger(__name__)


def require_cron_secret(view):
    """Allow the request only with ``Authorization: Bearer <CRON_SECRET>``.

    With no secret configured every guarded route answers 401.
    """

    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        secret = current_app.config["SETTINGS"].cron_secret
        header = request.headers.get("Authorization", "")
        if not secret or not hmac.compare_digest(header, f"Bearer {secret}"):
            logger.warning(f"Unauthorized request to {request.path}")
            return jsonify({"error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def limit_arg(default: int = 50, maximum: int = 200) -> int:
    limit = request.args.get("limit", default=default, type=int)
    return max(1, min(maximum, limit))
