"""Configuration package for Humane Logistics.

Re-exports the settings symbols so that callers can write::

    from humane_logistics.config import get_settings
"""

from __future__ import annotations

from humane_logistics.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
