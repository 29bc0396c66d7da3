from __future__ import annotations

"""Profile Writer — regenerates the creator's bio, tagline, skills and
personality from the synced videos."""

import logging
from typing import Optional

from ..database.models import Profile
from ..database.repository import Repository
from ..errors import PortfolioError
from ..prompts.profile import build_profile_prompt
from ..utils.json_extract import extract_json
from .llm_client import GenerativeClient

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = Profile(
    bio="Creator, YouTuber and artist sharing everyday stories and art.",
    tagline="Making things, one video at a time.",
    skills=["Video creation", "Art", "Storytelling"],
    personality="Warm, curious and creative.",
)

MAX_SKILLS = 8


class ProfileWriter:
    def __init__(self, client: GenerativeClient, repo: Repository, creator: dict):
        self.client = client
        self.repo = repo
        self.creator = creator

    def generate(self) -> Profile:
        """Generate and store a new profile. Raises GenerationError on upstream failure."""
        videos = self.repo.get_videos()
        prompt = build_profile_prompt(
            self.creator,
            [v.title for v in videos],
            [v.description for v in videos],
        )
        text = self.client.generate(prompt, temperature=0.8)

        data = extract_json(text, dict)
        if data is None:
            logger.warning("Profile response had no JSON object; keeping previous values")
            data = {}

        profile = self._merge(data, self.repo.get_profile() or DEFAULT_PROFILE)
        return self.repo.save_profile(profile)

    def run(self, trigger: str = "manual") -> Profile:
        try:
            profile = self.generate()
        except PortfolioError as e:
            self.repo.add_sync_log(
                "profile", "error", e.message,
                {"trigger": trigger, "category": e.category},
            )
            raise
        self.repo.add_sync_log(
            "profile", "success", "Profile regenerated", {"trigger": trigger}
        )
        return profile

    @staticmethod
    def _merge(data: dict, fallback: Profile) -> Profile:
        def text(key: str) -> str:
            value = data.get(key)
            return value.strip() if isinstance(value, str) and value.strip() else getattr(fallback, key)

        skills: Optional[list] = data.get("skills")
        if isinstance(skills, list):
            skills = [str(s).strip() for s in skills if isinstance(s, str) and s.strip()]
        if not skills:
            skills = list(fallback.skills)

        return Profile(
            bio=text("bio"),
            tagline=text("tagline"),
            skills=skills[:MAX_SKILLS],
            personality=text("personality"),
        )
