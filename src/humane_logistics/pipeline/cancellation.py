"""Cooperative cancellation for long-running pipeline cycles.

The orchestrator checks the token between collectors and between items, and
waits on it during the rescan's inter-item delay, so a cancelled cycle stops
at the next item boundary instead of mid-item.
"""

from __future__ import annotations

import asyncio


class CancellationToken:
    """Flag shared between a cycle and whoever may want to stop it."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def sleep(self, seconds: float) -> bool:
        """Sleep up to *seconds*, waking early on cancellation.

        Returns:
            True if the token was cancelled before or during the sleep.
        """
        if self.cancelled:
            return True
        if seconds <= 0:
            return False
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True
