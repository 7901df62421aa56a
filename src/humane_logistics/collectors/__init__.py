"""Media collectors: sources of candidate items for a topic and date range."""

from __future__ import annotations

from humane_logistics.collectors.base import MediaCollector, parse_date_bound
from humane_logistics.collectors.google_news import GoogleNewsCollector

__all__ = ["GoogleNewsCollector", "MediaCollector", "parse_date_bound"]
