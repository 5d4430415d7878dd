"""Read-only screening statistics."""

from fastapi import APIRouter, Request

from amlscreen.models import AMLStatistics

router = APIRouter(prefix="/api")


@router.get("/statistics", response_model=AMLStatistics)
async def get_statistics(request: Request) -> AMLStatistics:
    """Return aggregate counters and the flag rate since startup."""
    return request.app.state.engine.get_statistics()
