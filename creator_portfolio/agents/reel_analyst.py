from __future__ import annotations

"""Reel Analyst — LLM content analysis and competitor discovery for a reel.

Malformed model output is degraded field by field to safe defaults. Only a
failed upstream call on the primary analysis raises; competitor discovery is
best-effort and never raises."""

import logging
import math

from ..database.models import AIAnalysis, Competitor
from ..errors import AnalysisError, GenerationError
from ..prompts.reel_analysis import (
    MAX_COMPETITOR_KEYWORDS,
    build_analysis_prompt,
    build_competitor_prompt,
)
from ..utils.json_extract import extract_json
from .llm_client import GenerativeClient

logger = logging.getLogger(__name__)

DEFAULT_VIRALITY = 5
MIN_VIRALITY = 1
MAX_VIRALITY = 10
MAX_COMPETITORS = 10


def clamp_virality(value) -> int:
    """Integer score in [1, 10]. Missing, zero or non-numeric values become 5."""
    if isinstance(value, bool) or value is None:
        return DEFAULT_VIRALITY
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return DEFAULT_VIRALITY
    if not isinstance(value, (int, float)) or math.isnan(value) or value == 0:
        return DEFAULT_VIRALITY
    return int(round(max(float(MIN_VIRALITY), min(float(MAX_VIRALITY), float(value)))))


def _text(value, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _str_list(value, strip_hash: bool = False) -> list[str]:
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            continue
        text = str(item).strip()
        if strip_hash:
            text = text.lstrip("#")
        if text:
            items.append(text)
    return items


def _pick(data: dict, *keys):
    for key in keys:
        if key in data:
            return data[key]
    return None


def coerce_analysis(data) -> AIAnalysis:
    """Validate a parsed model response into an AIAnalysis, defaulting bad fields."""
    if not isinstance(data, dict):
        data = {}
    return AIAnalysis(
        topic=_text(data.get("topic"), "Unknown"),
        language=_text(data.get("language"), "Unknown"),
        tone=_text(data.get("tone"), "Unknown"),
        keywords=_str_list(data.get("keywords")),
        audience=_text(data.get("audience"), "General"),
        virality_score=clamp_virality(_pick(data, "viralityScore", "virality_score")),
        improvement_ideas=_str_list(_pick(data, "improvementIdeas", "improvement_ideas")),
        recommended_hashtags=_str_list(
            _pick(data, "recommendedHashtags", "recommended_hashtags"), strip_hash=True
        ),
    )


def competitor_keywords(*groups: list[str]) -> list[str]:
    """Merge keyword groups, dropping '#', blanks and duplicates (case-insensitive)."""
    merged, seen = [], set()
    for group in groups:
        for kw in group or []:
            if not isinstance(kw, str):
                continue
            cleaned = kw.strip().lstrip("#")
            if cleaned and cleaned.lower() not in seen:
                seen.add(cleaned.lower())
                merged.append(cleaned)
    return merged


class ReelAnalyst:
    """Runs the two LLM calls behind a reel analysis."""

    def __init__(self, client: GenerativeClient):
        self.client = client

    def analyze_content(self, caption: str, hashtags: list[str]) -> AIAnalysis:
        prompt = build_analysis_prompt(caption, hashtags)
        try:
            text = self.client.generate(prompt)
        except GenerationError as e:
            logger.error(f"Reel analysis failed ({e.category}): {e.message}")
            raise AnalysisError(
                e.message, category=e.category, status_code=e.status_code
            ) from e

        data = extract_json(text, dict)
        if data is None:
            logger.warning("Analysis response had no JSON object; using defaults")
        return coerce_analysis(data)

    def discover_competitors(
        self, keywords: list[str], exclude_handle: str = ""
    ) -> list[Competitor]:
        """Similar creators, excluding ``exclude_handle``. Empty list on any failure."""
        keywords = competitor_keywords(keywords)[:MAX_COMPETITOR_KEYWORDS]
        if not keywords:
            logger.info("No keywords for competitor discovery")
            return []

        try:
            text = self.client.generate(build_competitor_prompt(keywords))
            data = extract_json(text, list)
        except Exception as e:
            logger.warning(f"Competitor discovery failed: {e}")
            return []

        if data is None:
            logger.warning("Competitor response had no JSON array")
            return []

        excluded = (exclude_handle or "").strip().lstrip("@").lower()
        competitors = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            username = str(entry.get("username") or "").strip().lstrip("@")
            if not username or username.lower() == excluded:
                continue
            competitors.append(Competitor(
                username=username,
                reel_url=str(_pick(entry, "reelUrl", "reel_url") or ""),
                reason=_text(entry.get("reason"), "Similar content"),
            ))
            if len(competitors) >= MAX_COMPETITORS:
                break
        return competitors
