from __future__ import annotations

"""Prompt templates for reel content analysis and competitor discovery."""

MAX_COMPETITOR_KEYWORDS = 5


def build_analysis_prompt(caption: str, hashtags: list[str]) -> str:
    """Build the structured content-analysis prompt for one reel."""
    caption_text = caption.strip() or "(no caption available)"
    hashtag_text = ", ".join(hashtags) if hashtags else "(none)"

    return f"""Analyze this Instagram reel content and return ONLY valid JSON \
(no markdown, no code blocks):

Caption: {caption_text}
Hashtags: {hashtag_text}

Return JSON in this exact format:
{{
  "topic": "string describing the main topic/theme",
  "language": "string (e.g., English, Hindi, Hinglish)",
  "tone": "string (e.g., funny, educational, inspirational, casual)",
  "keywords": ["keyword1", "keyword2", "keyword3"],
  "audience": "string describing target audience",
  "viralityScore": number (1-10, where 10 is most viral),
  "improvementIdeas": ["idea1", "idea2", "idea3"],
  "recommendedHashtags": ["hashtag1", "hashtag2", "hashtag3"]
}}

Only return valid JSON, nothing else."""


def build_competitor_prompt(keywords: list[str]) -> str:
    """Ask for a ranked list of similar creators as a JSON array.

    Only the first MAX_COMPETITOR_KEYWORDS keywords are sent.
    """
    keyword_text = ", ".join(keywords[:MAX_COMPETITOR_KEYWORDS])

    return f"""Based on these keywords: {keyword_text}

Find and rank 5-10 Instagram reel creators who create similar content. \
These should be potential competitors.

Return ONLY a valid JSON array (no markdown, no code blocks):
[
  {{
    "username": "creator_username",
    "reelUrl": "https://www.instagram.com/reel/ABC123/",
    "reason": "Why this creator is a competitor (1-2 sentences)"
  }}
]

Only return a valid JSON array, nothing else. If you cannot find real \
competitors, return an empty array []."""
