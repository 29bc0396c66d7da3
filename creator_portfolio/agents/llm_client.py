from __future__ import annotations

"""Gemini generateContent client shared by the reel analyst and the profile writer."""

import logging
from typing import Optional

import requests

from ..errors import ConfigurationError, GenerationError

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash"

USER_MESSAGES = {
    "model_not_found": "Gemini model not found. Please check API configuration.",
    "unauthorized": "Gemini API key is invalid. Please check your GEMINI_API_KEY.",
    "quota_exceeded": "Gemini API quota exceeded. Please retry later.",
    "empty_response": "Gemini returned an empty response. Please retry.",
    "transport": "Could not reach the Gemini API. Please retry.",
}


def _category_for_status(status_code: int) -> str:
    if status_code == 404:
        return "model_not_found"
    if status_code in (401, 403):
        return "unauthorized"
    if status_code == 429:
        return "quota_exceeded"
    return "upstream"


class GenerativeClient:
    """Sends a single-turn prompt to Gemini and returns the text reply."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        temperature: float = 0.4,
    ):
        if not api_key:
            raise ConfigurationError(["GEMINI_API_KEY"])
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.temperature = temperature

    @property
    def endpoint(self) -> str:
        return f"{GEMINI_API_BASE}/models/{self.model}:generateContent"

    def generate(self, prompt: str, temperature: Optional[float] = None) -> str:
        """Return the model's text. Raises GenerationError on any failure."""
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature if temperature is None else temperature,
            },
        }
        try:
            resp = requests.post(
                self.endpoint,
                params={"key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Gemini request failed ({self.model}): {type(e).__name__}: {e}")
            raise GenerationError(USER_MESSAGES["transport"], category="transport") from e

        if not resp.ok:
            category = _category_for_status(resp.status_code)
            detail = _error_detail(resp)
            logger.error(f"Gemini API error {resp.status_code} ({self.model}): {detail}")
            message = USER_MESSAGES.get(
                category, f"Gemini request failed: {detail}. Please retry."
            )
            raise GenerationError(message, category=category, status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise GenerationError(USER_MESSAGES["empty_response"], category="empty_response") from e

        text = _candidate_text(data)
        if not text:
            raise GenerationError(USER_MESSAGES["empty_response"], category="empty_response")
        return text


def _candidate_text(data: dict) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()


def _error_detail(resp) -> str:
    try:
        error = resp.json().get("error", {})
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
    except (ValueError, AttributeError):
        pass
    return resp.reason or f"HTTP {resp.status_code}"
