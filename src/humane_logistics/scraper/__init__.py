"""Best-effort article text fetching.

Sub-modules:
- ``config``          : timeout, user-agent and content-type constants
- ``content_fetcher`` : httpx + BeautifulSoup paragraph-text fetcher
"""

from __future__ import annotations

from humane_logistics.scraper.content_fetcher import ContentFetcher, extract_paragraph_text

__all__ = ["ContentFetcher", "extract_paragraph_text"]
