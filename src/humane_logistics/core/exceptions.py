"""Application-wide exception hierarchy for Humane Logistics.

All custom exceptions subclass ``HumaneLogisticsError``, enabling
consistent error handling and structured logging across the pipeline.

Hierarchy::

    HumaneLogisticsError
    ├── CollectionError
    │   └── CollectorRateLimitError   (retry_after: float)
    ├── EnrichmentError
    │   ├── EnrichmentRateLimitError  (retry_after: float)
    │   └── EnrichmentAuthError
    ├── PersistenceError
    ├── RepositoryUnavailableError
    └── ConfigurationError

Only ``RepositoryUnavailableError`` and ``ConfigurationError`` are allowed to
escape an ingest or rescan cycle; every other error is per-item and is
caught by the loop iteration that owns the item.
"""

from __future__ import annotations


class HumaneLogisticsError(Exception):
    """Base class for all Humane Logistics exceptions.

    All application-specific exceptions inherit from this class so that
    callers can catch the entire hierarchy with a single ``except`` clause
    when needed.
    """


# ---------------------------------------------------------------------------
# Collector exceptions
# ---------------------------------------------------------------------------


class CollectionError(HumaneLogisticsError):
    """Raised when a collector fails to produce candidate items.

    The orchestrator treats this as "no items this round" for the collector.

    Args:
        message: Human-readable description of the failure.
        collector: Name of the collector that failed (e.g. ``"google_news"``).
    """

    def __init__(self, message: str, collector: str | None = None) -> None:
        super().__init__(message)
        self.collector = collector


class CollectorRateLimitError(CollectionError):
    """Raised when a collector is rate-limited by its upstream source.

    Args:
        message: Human-readable description of the rate limit.
        retry_after: Seconds to wait before retrying. Defaults to 60.
        collector: Name of the collector that was rate-limited.
    """

    def __init__(
        self,
        message: str,
        retry_after: float = 60.0,
        collector: str | None = None,
    ) -> None:
        super().__init__(message, collector=collector)
        self.retry_after = retry_after


# ---------------------------------------------------------------------------
# Enrichment exceptions
# ---------------------------------------------------------------------------


class EnrichmentError(HumaneLogisticsError):
    """Raised when a sentiment scorer or damage classifier fails recoverably.

    The item keeps its prior value for the failed dimension and stays
    eligible for the next rescan.

    Args:
        message: Human-readable description of the failure.
        engine: Name of the engine that failed (e.g. ``"afinn"``).
    """

    def __init__(self, message: str, engine: str | None = None) -> None:
        super().__init__(message)
        self.engine = engine


class EnrichmentRateLimitError(EnrichmentError):
    """Raised when a hosted enrichment engine returns HTTP 429.

    Args:
        message: Human-readable description of the rate limit.
        retry_after: Seconds to wait before retrying. Defaults to 60.
        engine: Name of the engine that was rate-limited.
    """

    def __init__(
        self,
        message: str,
        retry_after: float = 60.0,
        engine: str | None = None,
    ) -> None:
        super().__init__(message, engine=engine)
        self.retry_after = retry_after


class EnrichmentAuthError(EnrichmentError):
    """Raised when a hosted enrichment engine rejects the configured API key."""


# ---------------------------------------------------------------------------
# Storage exceptions
# ---------------------------------------------------------------------------


class PersistenceError(HumaneLogisticsError):
    """Raised when a repository write or read fails for a single operation.

    Args:
        message: Description of the persistence failure.
        repository: Label or class name of the repository.
    """

    def __init__(self, message: str, repository: str | None = None) -> None:
        super().__init__(message)
        self.repository = repository


class RepositoryUnavailableError(HumaneLogisticsError):
    """Raised when the document store cannot be opened at startup.

    This is a resource-acquisition failure and is fatal to the process.
    """


class ConfigurationError(HumaneLogisticsError):
    """Raised when the orchestrator is asked to run without a usable repository.

    Covers an empty repository federation and a write target label that
    does not name a registered repository.
    """
