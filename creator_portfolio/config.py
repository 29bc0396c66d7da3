import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent


def load_config() -> dict:
    """Load configuration from .env and config.yaml. Env vars take precedence."""
    load_dotenv(PROJECT_ROOT / ".env")

    config_path = PROJECT_ROOT / "config.yaml"
    if config_path.exists():
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}
    else:
        config = {}

    # Resolve database path relative to project root
    db_rel = os.getenv("DATABASE_PATH") or config.get("database", {}).get(
        "path", "data/creator_portfolio.db"
    )
    config["db_path"] = str(PROJECT_ROOT / db_rel)

    # Resolve log file path
    log_rel = config.get("logging", {}).get("file")
    if log_rel:
        config["log_file"] = str(PROJECT_ROOT / log_rel)
    else:
        config["log_file"] = None

    config["log_level"] = os.getenv("LOG_LEVEL") or config.get("logging", {}).get(
        "level", "INFO"
    )

    # Secrets only ever come from the environment
    youtube = config.setdefault("youtube", {})
    if os.getenv("YOUTUBE_API_KEY"):
        youtube["api_key"] = os.getenv("YOUTUBE_API_KEY")
    if os.getenv("YOUTUBE_CHANNEL_ID"):
        youtube["trusted_channel_id"] = os.getenv("YOUTUBE_CHANNEL_ID")

    gemini = config.setdefault("gemini", {})
    if os.getenv("GEMINI_API_KEY"):
        gemini["api_key"] = os.getenv("GEMINI_API_KEY")
    if os.getenv("GEMINI_MODEL"):
        gemini["model"] = os.getenv("GEMINI_MODEL")

    if os.getenv("CRON_SECRET"):
        config["cron_secret"] = os.getenv("CRON_SECRET")

    return config


def get_youtube_config(config: dict) -> dict:
    """Extract YouTube Data API settings with defaults."""
    yt = config.get("youtube", {})
    return {
        "api_key": yt.get("api_key"),
        "trusted_channel_id": yt.get("trusted_channel_id"),
        "max_results": min(int(yt.get("max_results", 12)), 50),
        "timeout": float(yt.get("timeout", 15.0)),
        "feed_limit": int(yt.get("feed_limit", 6)),
    }


def get_gemini_config(config: dict) -> dict:
    """Extract generative model settings with defaults."""
    gemini = config.get("gemini", {})
    return {
        "api_key": gemini.get("api_key"),
        "model": gemini.get("model", "gemini-1.5-flash"),
        "timeout": float(gemini.get("timeout", 60.0)),
        "temperature": float(gemini.get("temperature", 0.4)),
    }


def get_scraper_config(config: dict) -> dict:
    scraper = config.get("scraper", {})
    return {
        "timeout": float(scraper.get("timeout", 10.0)),
    }


def get_instagram_config(config: dict) -> dict:
    """Curated post URLs per account ("main", "art")."""
    ig = config.get("instagram") or {}
    return {
        "main": [str(u).strip() for u in ig.get("main") or [] if u],
        "art": [str(u).strip() for u in ig.get("art") or [] if u],
    }


def get_creator_config(config: dict) -> dict:
    """Creator identity used by the profile writer prompt."""
    creator = config.get("creator", {})
    return {
        "name": creator.get("name", "the creator"),
        "youtube_handle": creator.get("youtube_handle", ""),
        "instagram_handles": list(creator.get("instagram_handles", [])),
        "profile_language": creator.get("profile_language", "English"),
    }


@dataclass(frozen=True)
class Settings:
    """Validated runtime settings. Build with ``validate_settings``."""

    db_path: str
    youtube_api_key: str
    trusted_channel_id: str
    youtube_max_results: int = 12
    youtube_timeout: float = 15.0
    feed_limit: int = 6
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_timeout: float = 60.0
    gemini_temperature: float = 0.4
    scraper_timeout: float = 10.0
    instagram_main_posts: tuple = ()
    instagram_art_posts: tuple = ()
    cron_secret: Optional[str] = None


def validate_settings(config: dict) -> Settings:
    """Check required settings once at process entry.

    Raises ConfigurationError listing every missing key together.
    """
    yt = get_youtube_config(config)
    gemini = get_gemini_config(config)
    scraper = get_scraper_config(config)
    instagram = get_instagram_config(config)

    missing = []
    if not yt["api_key"]:
        missing.append("YOUTUBE_API_KEY")
    if not yt["trusted_channel_id"]:
        missing.append("YOUTUBE_CHANNEL_ID")
    if not config.get("db_path"):
        missing.append("db_path")
    if missing:
        raise ConfigurationError(missing)

    for env_name, value in (
        ("GEMINI_API_KEY", gemini["api_key"]),
        ("CRON_SECRET", config.get("cron_secret")),
    ):
        if not value:
            logger.warning(f"Optional setting {env_name} is not set")

    return Settings(
        db_path=config["db_path"],
        youtube_api_key=yt["api_key"],
        trusted_channel_id=yt["trusted_channel_id"],
        youtube_max_results=yt["max_results"],
        youtube_timeout=yt["timeout"],
        feed_limit=yt["feed_limit"],
        gemini_api_key=gemini["api_key"],
        gemini_model=gemini["model"],
        gemini_timeout=gemini["timeout"],
        gemini_temperature=gemini["temperature"],
        scraper_timeout=scraper["timeout"],
        instagram_main_posts=tuple(instagram["main"]),
        instagram_art_posts=tuple(instagram["art"]),
        cron_secret=config.get("cron_secret"),
    )
