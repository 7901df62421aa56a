"""Defaults for the article content fetcher."""

from __future__ import annotations

DEFAULT_TIMEOUT: float = 5.0

USER_AGENT: str = (
    "HumaneLogistics/1.0 (+disaster-response research; contact: research@example.org)"
)

# Content-Type prefixes never parsed for paragraph text.
BINARY_CONTENT_TYPES: tuple[str, ...] = (
    "application/octet-stream",
    "application/pdf",
    "application/vnd.",
    "application/zip",
    "audio/",
    "font/",
    "image/",
    "video/",
)
