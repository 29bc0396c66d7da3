"""Tests for reel content analysis and competitor discovery."""
from __future__ import annotations

import json

import pytest

from creator_portfolio.agents.reel_analyst import (
    ReelAnalyst,
    clamp_virality,
    coerce_analysis,
    competitor_keywords,
)
from creator_portfolio.errors import AnalysisError, GenerationError

GOOD_ANALYSIS = json.dumps({
    "topic": "Sketching",
    "language": "English",
    "tone": "calm",
    "keywords": ["sketch", "pencil", "art"],
    "audience": "Hobby artists",
    "viralityScore": 7,
    "improvementIdeas": ["Add a hook", "Show the final piece first"],
    "recommendedHashtags": ["#sketchbook", "drawing"],
})


class TestClampVirality:
    @pytest.mark.parametrize("value,expected", [
        (7, 7),
        (15, 10),
        (-3, 1),
        (0.4, 1),
        (6.6, 7),
        ("8", 8),
        (0, 5),
        (None, 5),
        ("high", 5),
        (True, 5),
        (float("nan"), 5),
    ])
    def test_values(self, value, expected):
        assert clamp_virality(value) == expected


class TestCoerceAnalysis:
    def test_full(self):
        analysis = coerce_analysis(json.loads(GOOD_ANALYSIS))
        assert analysis.topic == "Sketching"
        assert analysis.virality_score == 7
        assert analysis.improvement_ideas == ["Add a hook", "Show the final piece first"]
        assert analysis.recommended_hashtags == ["sketchbook", "drawing"]

    def test_defaults(self):
        analysis = coerce_analysis({})
        assert analysis.topic == "Unknown"
        assert analysis.language == "Unknown"
        assert analysis.tone == "Unknown"
        assert analysis.audience == "General"
        assert analysis.keywords == []
        assert analysis.virality_score == 5

    def test_wrong_types_degrade(self):
        analysis = coerce_analysis({
            "topic": 42,
            "keywords": "not a list",
            "viralityScore": "very",
            "improvementIdeas": [None, "ok", {"x": 1}],
        })
        assert analysis.topic == "Unknown"
        assert analysis.keywords == []
        assert analysis.virality_score == 5
        assert analysis.improvement_ideas == ["ok"]

    def test_snake_case_keys(self):
        analysis = coerce_analysis({"virality_score": 9, "recommended_hashtags": ["a"]})
        assert analysis.virality_score == 9
        assert analysis.recommended_hashtags == ["a"]

    def test_non_dict(self):
        assert coerce_analysis(None).topic == "Unknown"


class TestCompetitorKeywords:
    def test_merge_dedup(self):
        assert competitor_keywords(["#Art", "sketch"], ["art", "Pencil", ""]) == [
            "Art", "sketch", "Pencil",
        ]


class TestAnalyzeContent:
    def test_parses_response(self, llm):
        client = llm(f"```json\n{GOOD_ANALYSIS}\n```")
        analysis = ReelAnalyst(client).analyze_content("Sketch #art", ["art"])

        assert analysis.topic == "Sketching"
        assert "Sketch #art" in client.prompts[0]
        assert "art" in client.prompts[0]

    def test_unparsable_response_degrades(self, llm):
        analysis = ReelAnalyst(llm("I cannot help with that.")).analyze_content("c", [])
        assert analysis.topic == "Unknown"
        assert analysis.virality_score == 5

    def test_upstream_failure_raises_analysis_error(self, llm):
        err = GenerationError("Gemini API quota exceeded. Please retry later.",
                              category="quota_exceeded", status_code=429)
        with pytest.raises(AnalysisError) as exc:
            ReelAnalyst(llm(err)).analyze_content("c", [])
        assert exc.value.category == "quota_exceeded"
        assert exc.value.status_code == 429


class TestDiscoverCompetitors:
    def test_parses_and_excludes_creator(self, llm):
        reply = json.dumps([
            {"username": "@Sketchy_Sam", "reelUrl": "https://www.instagram.com/reel/S/", "reason": "self"},
            {"username": "ink_ivy", "reelUrl": "https://www.instagram.com/reel/I/", "reason": "Ink art"},
            {"username": "", "reason": "blank"},
            "garbage",
            {"username": "pencil_pete"},
        ])
        competitors = ReelAnalyst(llm(reply)).discover_competitors(["art"], "sketchy_sam")

        assert [c.username for c in competitors] == ["ink_ivy", "pencil_pete"]
        assert competitors[0].reel_url == "https://www.instagram.com/reel/I/"
        assert competitors[1].reason == "Similar content"

    def test_caps_at_ten(self, llm):
        reply = json.dumps([{"username": f"user{i}"} for i in range(15)])
        competitors = ReelAnalyst(llm(reply)).discover_competitors(["art"])
        assert len(competitors) == 10

    def test_only_five_keywords_sent(self, llm):
        client = llm("[]")
        ReelAnalyst(client).discover_competitors(["k1", "k2", "k3", "k4", "k5", "k6", "k7"])
        assert "k5" in client.prompts[0]
        assert "k6" not in client.prompts[0]

    def test_no_keywords_skips_call(self, llm):
        client = llm()
        assert ReelAnalyst(client).discover_competitors([]) == []
        assert client.prompts == []

    def test_failure_returns_empty(self, llm):
        client = llm(GenerationError("down", category="transport"))
        assert ReelAnalyst(client).discover_competitors(["art"]) == []

    def test_non_array_returns_empty(self, llm):
        assert ReelAnalyst(llm('{"username": "x"}')).discover_competitors(["art"]) == []
