from __future__ import annotations

"""Flask application factory for the portfolio backend API."""

import logging
import threading

from flask import Flask, jsonify

from ..config import load_config, validate_settings, get_creator_config, Settings
from ..database.repository import Repository
from ..errors import (
    PortfolioError,
    ConfigurationError,
    IntegrityViolation,
    UpstreamError,
    ValidationError,
)
from ..agents.llm_client import GenerativeClient
from ..agents.reel_analyst import ReelAnalyst
from ..agents.profile_writer import ProfileWriter
from ..ingestion.youtube_api import YouTubeDataClient
from ..ingestion.channel_sync import ChannelSync
from ..ingestion.pipeline import ChannelIngestionPipeline
from ..ingestion.reel_scraper import ReelScraper
from ..ingestion.reel_pipeline import ReelAnalysisPipeline
from ..ingestion.instagram_feed import InstagramFeed

logger = logging.getLogger(__name__)

_init_lock = threading.RLock()


def create_app(config: dict = None) -> Flask:
    """Create and configure the Flask application.

    Settings are validated here, once; missing required keys stop startup.
    """
    if config is None:
        config = load_config()

    settings = validate_settings(config)

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.config["CREATOR"] = get_creator_config(config)

    from .routes.youtube import youtube_bp
    from .routes.instagram import instagram_bp
    from .routes.sync import sync_bp
    from .routes.reels import reels_bp
    from .routes.profile import profile_bp
    from .routes.status import status_bp

    app.register_blueprint(youtube_bp, url_prefix="/api")
    app.register_blueprint(instagram_bp, url_prefix="/api")
    app.register_blueprint(sync_bp, url_prefix="/api")
    app.register_blueprint(reels_bp, url_prefix="/api")
    app.register_blueprint(profile_bp, url_prefix="/api")
    app.register_blueprint(status_bp, url_prefix="/api")

    @app.errorhandler(PortfolioError)
    def handle_portfolio_error(error: PortfolioError):
        if isinstance(error, ValidationError):
            status = 400
        elif isinstance(error, UpstreamError):
            status = 502
        else:
            status = 500
        if status >= 500:
            logger.error(f"{type(error).__name__} ({error.category}): {error.message}")
        body = {"success": False, "error": error.message, "category": error.category}
        if isinstance(error, IntegrityViolation):
            body["debug"] = error.debug
        if isinstance(error, ValidationError) and error.details:
            body["details"] = error.details
        return jsonify(body), status

    return app


def get_settings(app: Flask) -> Settings:
    return app.config["SETTINGS"]


def _memoized(app: Flask, attr: str, factory):
    """Build a shared handle once per app and reuse it for every request."""
    value = getattr(app, attr, None)
    if value is None:
        with _init_lock:
            value = getattr(app, attr, None)
            if value is None:
                value = factory()
                setattr(app, attr, value)
    return value


def get_repo(app: Flask) -> Repository:
    """Get or create the Repository instance for the app."""
    return _memoized(app, "_repo", lambda: Repository(get_settings(app).db_path))


def get_channel_sync(app: Flask) -> ChannelSync:
    settings = get_settings(app)

    def build():
        client = YouTubeDataClient(settings.youtube_api_key, timeout=settings.youtube_timeout)
        return ChannelSync(
            client, settings.trusted_channel_id, max_results=settings.youtube_max_results
        )

    return _memoized(app, "_channel_sync", build)


def get_ingestion_pipeline(app: Flask) -> ChannelIngestionPipeline:
    return _memoized(
        app, "_ingestion_pipeline",
        lambda: ChannelIngestionPipeline(get_channel_sync(app), get_repo(app)),
    )


def get_instagram_feed(app: Flask) -> InstagramFeed:
    settings = get_settings(app)
    return _memoized(
        app, "_instagram_feed",
        lambda: InstagramFeed(
            get_repo(app), settings.instagram_main_posts, settings.instagram_art_posts
        ),
    )


def get_generative_client(app: Flask) -> GenerativeClient:
    """Raises ConfigurationError (not memoized) when GEMINI_API_KEY is absent."""
    settings = get_settings(app)
    if not settings.gemini_api_key:
        raise ConfigurationError(["GEMINI_API_KEY"])
    return _memoized(
        app, "_generative_client",
        lambda: GenerativeClient(
            settings.gemini_api_key,
            model=settings.gemini_model,
            timeout=settings.gemini_timeout,
            temperature=settings.gemini_temperature,
        ),
    )


def get_reel_pipeline(app: Flask) -> ReelAnalysisPipeline:
    client = get_generative_client(app)
    settings = get_settings(app)
    return _memoized(
        app, "_reel_pipeline",
        lambda: ReelAnalysisPipeline(
            ReelScraper(timeout=settings.scraper_timeout),
            ReelAnalyst(client),
            get_repo(app),
        ),
    )


def get_profile_writer(app: Flask) -> ProfileWriter:
    client = get_generative_client(app)
    return _memoized(
        app, "_profile_writer",
        lambda: ProfileWriter(client, get_repo(app), app.config["CREATOR"]),
    )
