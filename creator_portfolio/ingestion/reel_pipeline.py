from __future__ import annotations

import logging

from ..agents.reel_analyst import ReelAnalyst, competitor_keywords
from ..database.models import ReelAnalysis
from ..database.repository import Repository
from ..errors import PortfolioError, ValidationError
from .reel_scraper import ReelScraper, normalize_url, validate_url

logger = logging.getLogger(__name__)

INVALID_URL_MESSAGE = (
    "Invalid Instagram Reel URL. Must be instagram.com/reel/* or instagram.com/p/*"
)


class ReelAnalysisPipeline:
    """URL -> cached analysis: normalize, validate, cache lookup, scrape, analyze, upsert."""

    def __init__(self, scraper: ReelScraper, analyst: ReelAnalyst, repo: Repository):
        self.scraper = scraper
        self.analyst = analyst
        self.repo = repo

    def get_or_create_analysis(self, url: str) -> tuple[ReelAnalysis, bool]:
        """Return (analysis, cached). A cache hit makes no network calls."""
        if not isinstance(url, str) or not url.strip():
            raise ValidationError("reel_url is required")

        reel_url = normalize_url(url)
        if not validate_url(reel_url):
            raise ValidationError(INVALID_URL_MESSAGE)

        cached = self.repo.get_reel_analysis(reel_url)
        if cached is not None:
            logger.info(f"Returning cached analysis for {reel_url}")
            return cached, True

        try:
            analysis = self._analyze(reel_url)
        except PortfolioError as e:
            self.repo.add_sync_log(
                "reel", "error", e.message,
                {"reel_url": reel_url, "category": e.category},
            )
            raise

        stored = self.repo.upsert_reel_analysis(analysis)
        self.repo.add_sync_log(
            "reel", "success", f"Analyzed {reel_url}",
            {"reel_url": reel_url, "competitors": len(stored.competitors)},
        )
        return stored, False

    def _analyze(self, reel_url: str) -> ReelAnalysis:
        logger.info(f"Scraping reel metadata: {reel_url}")
        metadata = self.scraper.scrape(reel_url)

        logger.info("Analyzing reel content")
        ai_analysis = self.analyst.analyze_content(metadata.caption, metadata.hashtags)

        logger.info("Discovering competitors")
        competitors = self.analyst.discover_competitors(
            competitor_keywords(metadata.hashtags, ai_analysis.keywords),
            metadata.creator_username,
        )

        return ReelAnalysis(
            reel_url=reel_url,
            caption=metadata.caption,
            hashtags=metadata.hashtags,
            creator_username=metadata.creator_username,
            thumbnail_url=metadata.thumbnail_url,
            audio_name=metadata.audio_name,
            ai_analysis=ai_analysis,
            competitors=competitors,
        )
