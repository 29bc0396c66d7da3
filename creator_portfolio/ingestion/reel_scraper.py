from __future__ import annotations

import html
import json
import re
import logging
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
}

OEMBED_URL = "https://api.instagram.com/oembed"

INSTAGRAM_HOSTS = {"instagram.com", "www.instagram.com"}
_POST_PATH_RE = re.compile(r"^/(?:reel|p)/[A-Za-z0-9_-]+(?:/|$)")

_REEL_ID_RE = re.compile(r"instagram\.com/(?:reel|p)/([A-Za-z0-9_-]+)")
_HASHTAG_RE = re.compile(r"#(\w+)")
_AUTHOR_URL_RE = re.compile(r"instagram\.com/([^/?#]+)")
_JSON_LD_RE = re.compile(
    r'<script type="application/ld\+json">(.*?)</script>', re.DOTALL
)
_OWNER_RE = re.compile(r'"owner":\s*{\s*"username":\s*"([^"]+)"')
_USERNAME_RE = re.compile(r'"username":\s*"([^"]+)"')


def _meta_re(prop: str) -> re.Pattern:
    return re.compile(rf'<meta property="{re.escape(prop)}" content="([^"]+)"')


_OG_TITLE_RE = _meta_re("og:title")
_OG_DESCRIPTION_RE = _meta_re("og:description")
_OG_IMAGE_RE = _meta_re("og:image")


@dataclass
class ReelMetadata:
    caption: str = ""
    hashtags: list[str] = field(default_factory=list)
    creator_username: str = "unknown"
    thumbnail_url: str = ""
    audio_name: Optional[str] = None


def normalize_url(url: str) -> str:
    """Cache key form: trimmed, without query string or fragment."""
    return url.strip().split("#", 1)[0].split("?", 1)[0]


def validate_url(url: str) -> bool:
    """True for instagram.com (or www.) URLs whose path is /reel/<id> or /p/<id>."""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https"):
        return False
    host = (parsed.hostname or "").lower()
    if host not in INSTAGRAM_HOSTS or not _POST_PATH_RE.match(parsed.path):
        return False
    # scrape() requires an extractable id (rejects ports, odd casing)
    return extract_reel_id(url) is not None


def extract_reel_id(url: str) -> Optional[str]:
    match = _REEL_ID_RE.search(url or "")
    return match.group(1) if match else None


def extract_hashtags(text: str) -> list[str]:
    """'#word' tokens without the '#', first-seen order, duplicates dropped."""
    seen = []
    for tag in _HASHTAG_RE.findall(text or ""):
        if tag not in seen:
            seen.append(tag)
    return seen


def fallback_thumbnail(reel_id: str) -> str:
    return f"https://www.instagram.com/p/{reel_id}/media/?size=l"


class ReelScraper:
    """Best-effort public metadata for an Instagram reel or post.

    Tries the oEmbed endpoint, then the post page itself. Never raises for
    network or parse failures; returns a minimal record instead.
    """

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    def scrape(self, url: str) -> ReelMetadata:
        reel_id = extract_reel_id(url)
        if not reel_id:
            raise ValueError(f"Invalid Instagram reel URL format: {url}")

        metadata = self._from_oembed(url, reel_id)
        if metadata is None:
            metadata = self._from_page(url, reel_id)
        if metadata is None:
            logger.warning(f"All scrape strategies failed for {url}; using minimal metadata")
            metadata = ReelMetadata(thumbnail_url=fallback_thumbnail(reel_id))
        return metadata

    def _from_oembed(self, url: str, reel_id: str) -> Optional[ReelMetadata]:
        try:
            resp = requests.get(
                OEMBED_URL, params={"url": url}, headers=HEADERS, timeout=self.timeout
            )
            if not resp.ok:
                logger.info(f"oEmbed returned {resp.status_code} for {url}")
                return None
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"oEmbed failed, trying page fallback: {e}")
            return None

        if not isinstance(data, dict):
            return None

        creator = "unknown"
        author_match = _AUTHOR_URL_RE.search(data.get("author_url") or "")
        if author_match:
            creator = author_match.group(1)
        elif data.get("author_name"):
            creator = data["author_name"].lstrip("@")

        caption = data.get("title") or data.get("description") or ""
        return ReelMetadata(
            caption=caption,
            hashtags=extract_hashtags(caption),
            creator_username=creator,
            thumbnail_url=data.get("thumbnail_url") or fallback_thumbnail(reel_id),
        )

    def _from_page(self, url: str, reel_id: str) -> Optional[ReelMetadata]:
        try:
            resp = requests.get(url, headers=HEADERS, timeout=self.timeout)
            if not resp.ok:
                logger.info(f"Page fetch returned {resp.status_code} for {url}")
                return None
            page = resp.text
        except requests.RequestException as e:
            logger.warning(f"Page fallback failed for {url}: {e}")
            return None
        return parse_page(page, reel_id)


def parse_page(page: str, reel_id: str) -> ReelMetadata:
    """Extract metadata from post HTML: JSON-LD first, then og: meta tags."""
    ld_match = _JSON_LD_RE.search(page)
    if ld_match:
        try:
            ld = json.loads(ld_match.group(1))
        except json.JSONDecodeError:
            logger.warning("JSON-LD block present but not parseable")
        else:
            if isinstance(ld, list) and ld:
                ld = ld[0]
            if isinstance(ld, dict):
                return _from_json_ld(ld, reel_id)

    def meta(pattern: re.Pattern) -> str:
        match = pattern.search(page)
        return html.unescape(match.group(1)).strip() if match else ""

    caption = meta(_OG_TITLE_RE) or meta(_OG_DESCRIPTION_RE)
    creator = "unknown"
    user_match = _OWNER_RE.search(page) or _USERNAME_RE.search(page)
    if user_match:
        creator = user_match.group(1)

    return ReelMetadata(
        caption=caption,
        hashtags=extract_hashtags(caption),
        creator_username=creator,
        thumbnail_url=meta(_OG_IMAGE_RE) or fallback_thumbnail(reel_id),
    )


def _from_json_ld(ld: dict, reel_id: str) -> ReelMetadata:
    caption = ld.get("caption") or ld.get("description") or ""
    author = ld.get("author")
    creator = "unknown"
    if isinstance(author, str) and author:
        creator = author.lstrip("@")
    elif isinstance(author, dict):
        name = author.get("alternateName") or author.get("name")
        if name:
            creator = name.lstrip("@")

    image = ld.get("image")
    if isinstance(image, list):
        image = image[0] if image else None
    if isinstance(image, dict):
        image = image.get("url")

    audio = ld.get("audio")
    audio_name = audio.get("name") if isinstance(audio, dict) else None

    return ReelMetadata(
        caption=caption,
        hashtags=extract_hashtags(caption),
        creator_username=creator,
        thumbnail_url=image or fallback_thumbnail(reel_id),
        audio_name=audio_name,
    )
