"""Google News RSS collector.

Queries the Google News RSS search endpoint for a topic, restricted to a
date range with the ``after:`` / ``before:`` search operators, and parses
the feed with ``feedparser``.

**Design notes**:

- Each entry becomes a :meth:`MediaItem.news` item.  The content is the
  headline with the trailing ``" - Source"`` suffix removed; the RSS
  summary only repeats the headline as a link.  Items therefore always
  carry inline text, and the article page itself is only fetched by the
  enrichment step when a headline is empty.
- Google News RSS is not paginated: page 1 returns the whole result set
  and later pages return nothing.
- HTTP 429 raises :class:`CollectorRateLimitError`; other HTTP or network
  failures raise :class:`CollectionError`.  The orchestrator treats both as
  "no items this round".
"""

from __future__ import annotations

import calendar
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any

import feedparser
import httpx

from humane_logistics.collectors.base import DateBound, MediaCollector, parse_date_bound
from humane_logistics.core.exceptions import CollectionError, CollectorRateLimitError
from humane_logistics.core.media import MediaItem

logger = logging.getLogger(__name__)

GOOGLE_NEWS_RSS_URL: str = "https://news.google.com/rss/search"

#: Upper bound on items returned from one search.
DEFAULT_MAX_RESULTS: int = 100

_HTML_TAG_RE = re.compile(r"<[^>]+>")


def _strip_html(text: str) -> str:
    """Strip HTML tags from *text* and collapse whitespace."""
    cleaned = _HTML_TAG_RE.sub(" ", text)
    return re.sub(r"\s+", " ", cleaned).strip()


def _entry_datetime(entry: Any) -> datetime | None:
    """Extract a timezone-aware publication datetime from a feedparser entry."""
    pub_struct = getattr(entry, "published_parsed", None) or getattr(entry, "updated_parsed", None)
    if pub_struct is None:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(pub_struct), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None


def _entry_source(entry: Any) -> str | None:
    source = entry.get("source") if hasattr(entry, "get") else None
    if not isinstance(source, dict):
        return None
    title = str(source.get("title") or "").strip()
    return title or None


class GoogleNewsCollector(MediaCollector):
    """Collects news headlines from Google News RSS search.

    Args:
        language: ``hl`` language code (e.g. ``"en"``).
        country: ``gl`` country code (e.g. ``"VN"``).
        max_results: Maximum number of items returned per search.
        http_client: Optional injected :class:`httpx.AsyncClient`.  Inject
            for testing.  If ``None``, a new client is created per call.
        timeout: Request timeout in seconds.
    """

    collector_name = "google_news"

    def __init__(
        self,
        language: str = "en",
        country: str = "US",
        max_results: int = DEFAULT_MAX_RESULTS,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.language = language
        self.country = country.upper()
        self.max_results = max_results
        self._http_client = http_client
        self._timeout = timeout

    def build_query(self, topic: str, date_from: DateBound, date_to: DateBound) -> str:
        """Return the search query with date operators appended.

        ``before:`` is exclusive on Google's side, so the upper bound is
        pushed one day forward to keep *date_to* inclusive.
        """
        parts = [topic.strip()]
        start = parse_date_bound(date_from)
        end = parse_date_bound(date_to)
        if start is not None:
            parts.append(f"after:{start.date().isoformat()}")
        if end is not None:
            parts.append(f"before:{(end.date() + timedelta(days=1)).isoformat()}")
        return " ".join(parts)

    def build_params(self, topic: str, date_from: DateBound, date_to: DateBound) -> dict[str, str]:
        return {
            "q": self.build_query(topic, date_from, date_to),
            "hl": f"{self.language}-{self.country}",
            "gl": self.country,
            "ceid": f"{self.country}:{self.language}",
        }

    async def collect(
        self,
        topic: str,
        date_from: DateBound,
        date_to: DateBound,
        page: int = 1,
    ) -> list[MediaItem]:
        if page > 1:
            return []

        params = self.build_params(topic, date_from, date_to)
        if self._http_client is not None:
            body = await self._fetch(self._http_client, params)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                body = await self._fetch(client, params)

        feed = feedparser.parse(body)
        if feed.bozo and not feed.entries:
            raise CollectionError(
                f"google_news: unparseable feed: {getattr(feed, 'bozo_exception', 'unknown')}",
                collector=self.collector_name,
            )

        items: list[MediaItem] = []
        for entry in feed.entries:
            item = self._to_item(topic, entry)
            if item is not None:
                items.append(item)
            if len(items) >= self.max_results:
                break

        logger.info("google_news: %d items for topic '%s'", len(items), topic)
        return items

    async def _fetch(self, client: httpx.AsyncClient, params: dict[str, str]) -> str:
        try:
            response = await client.get(GOOGLE_NEWS_RSS_URL, params=params)
        except httpx.RequestError as exc:
            raise CollectionError(
                f"google_news: request error: {exc}", collector=self.collector_name
            ) from exc

        if response.status_code == 429:
            retry_after = float(response.headers.get("Retry-After", 60))
            raise CollectorRateLimitError(
                "google_news: HTTP 429 rate limited",
                retry_after=retry_after,
                collector=self.collector_name,
            )
        if response.status_code >= 400:
            raise CollectionError(
                f"google_news: HTTP {response.status_code}", collector=self.collector_name
            )
        return response.text

    def _to_item(self, topic: str, entry: Any) -> MediaItem | None:
        source = _entry_source(entry)
        title = _strip_html(entry.get("title", "") or "")
        if source and title.endswith(f" - {source}"):
            title = title[: -len(f" - {source}")].rstrip()
        link = entry.get("link") or None
        if not title and not link:
            return None
        published = _entry_datetime(entry) or datetime.now(timezone.utc)
        return MediaItem.news(
            topic=topic,
            content=title,
            url=link,
            timestamp=published,
            source=source,
        )
