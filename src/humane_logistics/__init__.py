"""Humane Logistics: disaster-response media monitoring pipeline.

Collects news and social posts about a disaster topic, enriches them with
sentiment and damage-category labels, persists them, and serves the
aggregate statistics behind the reporting dashboard.
"""

from __future__ import annotations

__version__ = "0.1.0"
