from __future__ import annotations

"""Prompt template for the generated creator profile."""

PROFILE_SYSTEM_PROMPT = """\
You are a creative content writer for social media creators. You write short, \
warm, specific profile copy grounded in the creator's actual content.

Respond ONLY with valid JSON as specified. No text outside the JSON."""


def build_profile_prompt(
    creator: dict,
    video_titles: list[str],
    video_descriptions: list[str],
) -> str:
    """Build the profile-generation prompt from creator handles and recent videos."""
    handles = []
    if creator.get("youtube_handle"):
        handles.append(f"- YouTube channel: {creator['youtube_handle']}")
    for handle in creator.get("instagram_handles", []):
        handles.append(f"- Instagram: {handle}")
    handles_text = "\n".join(handles) if handles else "- (no handles configured)"

    titles_text = ", ".join(video_titles) if video_titles else "(no videos synced yet)"
    descriptions_text = " ".join(d for d in video_descriptions if d)[:2000]
    language = creator.get("profile_language", "English")

    return f"""{PROFILE_SYSTEM_PROMPT}

You are writing the profile for {creator.get('name', 'the creator')}, \
a YouTuber and artist. Write it in {language}.

Context:
{handles_text}
- Recent video titles: {titles_text}
- Video content: {descriptions_text or '(none)'}

Generate:
1. bio: a 3-4 sentence bio describing the creator
2. tagline: a catchy one-liner
3. skills: an array of 6-8 skills
4. personality: a 2-3 sentence description of personality traits

Return ONLY valid JSON in this exact format:
{{
  "bio": "string",
  "tagline": "string",
  "skills": ["string", "string"],
  "personality": "string"
}}"""
