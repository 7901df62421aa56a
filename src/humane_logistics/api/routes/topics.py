"""Read-only analytics routes for one topic.

All figures are merged across every registered repository:

``GET /api/topics/{topic}/summary``
    Dashboard headline figures (post count, sentiment, top damage type).
``GET /api/topics/{topic}/aggregate``
    Count, average sentiment, damage histogram and trends in one payload.
``GET /api/topics/{topic}/damage``
    Damage-type histogram keyed by display name.
``GET /api/topics/{topic}/trends``
    Per-repository daily sentiment trends keyed by ISO date.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Any, TypeVar

import structlog
from fastapi import APIRouter, HTTPException, status

from humane_logistics.api.dependencies import OrchestratorDep
from humane_logistics.core.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/topics", tags=["topics"])

T = TypeVar("T")


async def _run(query: Awaitable[T]) -> T:
    try:
        return await query
    except ConfigurationError as exc:
        logger.warning("topics: pipeline misconfigured", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc


@router.get("/{topic}/summary")
async def topic_summary(topic: str, orchestrator: OrchestratorDep) -> dict[str, Any]:
    summary = await _run(orchestrator.dashboard_summary(topic))
    return summary.to_dict()


@router.get("/{topic}/aggregate")
async def topic_aggregate(topic: str, orchestrator: OrchestratorDep) -> dict[str, Any]:
    aggregate = await _run(orchestrator.aggregate(topic))
    return aggregate.to_dict()


@router.get("/{topic}/damage")
async def topic_damage(topic: str, orchestrator: OrchestratorDep) -> dict[str, Any]:
    distribution = await _run(orchestrator.damage_distribution(topic))
    return {"topic": topic, "damage_distribution": distribution}


@router.get("/{topic}/trends")
async def topic_trends(topic: str, orchestrator: OrchestratorDep) -> dict[str, Any]:
    trends = await _run(orchestrator.sentiment_trends(topic))
    return {
        "topic": topic,
        "sentiment_trends": {
            label: {day.isoformat(): value for day, value in per_day.items()}
            for label, per_day in trends.items()
        },
    }
