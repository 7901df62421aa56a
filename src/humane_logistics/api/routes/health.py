"""Health check route.

``GET /api/health``
    Liveness plus the labels of the registered repositories.  Always
    returns HTTP 200; ``status`` is ``"degraded"`` when no orchestrator or
    no repository is available.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

router = APIRouter(tags=["system"])


@router.get("/api/health")
async def api_health(request: Request) -> dict[str, Any]:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    labels = list(orchestrator.repositories) if orchestrator is not None else []
    return {"status": "ok" if labels else "degraded", "repositories": labels}
