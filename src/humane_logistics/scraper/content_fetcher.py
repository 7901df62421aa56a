"""Best-effort article text fetcher.

Used by the enrichment step when an item carries no inline content but does
carry an HTTP(S) link.  Performs one GET with a bounded timeout and a fixed
identifying user-agent, then concatenates the text of every ``<p>`` element
on the page.

Every failure mode (malformed URL, timeout, network error, non-2xx status,
binary content type, undecodable body, parse error) yields an empty string.
An empty result means "no usable text", never an error.
"""

from __future__ import annotations

import logging
import re
import urllib.parse

import httpx
from bs4 import BeautifulSoup

from humane_logistics.scraper.config import BINARY_CONTENT_TYPES, DEFAULT_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def _is_http_url(url: str | None) -> bool:
    if not url:
        return False
    try:
        parsed = urllib.parse.urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _is_binary_content_type(content_type: str) -> bool:
    """Return ``True`` if the Content-Type indicates a non-text binary resource."""
    ct = content_type.lower().split(";")[0].strip()
    return any(ct.startswith(prefix) for prefix in BINARY_CONTENT_TYPES)


def extract_paragraph_text(html: str) -> str:
    """Return the whitespace-collapsed text of every ``<p>`` element in *html*.

    Paragraphs are joined by a single space in document order.  Returns an
    empty string when the page has no paragraph text or cannot be parsed.
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as exc:  # noqa: BLE001
        logger.debug("content_fetcher: parse error: %s", exc)
        return ""

    chunks: list[str] = []
    for paragraph in soup.find_all("p"):
        text = _WHITESPACE_RE.sub(" ", paragraph.get_text(" ")).strip()
        if text:
            chunks.append(text)
    return " ".join(chunks)


class ContentFetcher:
    """Fetch a page and return its paragraph text, or ``""`` on any failure.

    Args:
        timeout: Request timeout in seconds.
        user_agent: ``User-Agent`` header sent with every request.
        client: Optional injected :class:`httpx.AsyncClient`.  Inject for
            testing or to share a connection pool.  When ``None``, the
            fetcher creates and owns its own client.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = USER_AGENT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def fetch_text(self, url: str | None) -> str:
        """Fetch *url* and return the concatenated paragraph text.

        Args:
            url: Absolute HTTP(S) URL.

        Returns:
            The page's paragraph text, or ``""`` on any failure.
        """
        if not _is_http_url(url):
            logger.debug("content_fetcher: not an http(s) url: %r", url)
            return ""

        try:
            response = await self._get_client().get(
                url,  # type: ignore[arg-type]
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )
        except httpx.TimeoutException:
            logger.info("content_fetcher: timeout fetching %s", url)
            return ""
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.info("content_fetcher: request error for %s: %s", url, exc)
            return ""

        if not response.is_success:
            logger.info("content_fetcher: HTTP %d for %s", response.status_code, url)
            return ""

        content_type = response.headers.get("content-type", "")
        if _is_binary_content_type(content_type):
            logger.info("content_fetcher: skipping binary content-type '%s' for %s", content_type, url)
            return ""

        try:
            html = response.text
        except Exception as exc:  # noqa: BLE001
            logger.info("content_fetcher: decode error for %s: %s", url, exc)
            return ""

        return extract_paragraph_text(html)

    async def aclose(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ContentFetcher:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
