from __future__ import annotations

from .llm_client import GenerativeClient
from .reel_analyst import ReelAnalyst
from .profile_writer import ProfileWriter

__all__ = [
    "GenerativeClient",
    "ReelAnalyst",
    "ProfileWriter",
]
