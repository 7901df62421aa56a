"""FastAPI dependency providers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from humane_logistics.pipeline.orchestrator import AnalysisOrchestrator


def get_orchestrator(request: Request) -> AnalysisOrchestrator:
    """Return the orchestrator stored on ``app.state``.

    Raises:
        HTTPException: 503 if the application has no orchestrator yet.
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Pipeline is not initialised.",
        )
    return orchestrator


OrchestratorDep = Annotated[AnalysisOrchestrator, Depends(get_orchestrator)]
