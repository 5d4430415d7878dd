"""Suspicious Activity Report lookup endpoints for compliance review."""

from typing import List

from fastapi import APIRouter, HTTPException, Request

from amlscreen.models import SAR
from amlscreen.screening.engine import AMLEngine

router = APIRouter(prefix="/api")


def _get_engine(request: Request) -> AMLEngine:
    """Retrieve the screening engine from application state."""
    return request.app.state.engine


@router.get("/sars", response_model=List[SAR])
async def list_sars(request: Request) -> List[SAR]:
    """Return every filed SAR in filing order."""
    return _get_engine(request).get_all_sars()


@router.get("/sars/{sar_id}", response_model=SAR)
async def get_sar(sar_id: str, request: Request) -> SAR:
    sar = _get_engine(request).get_sar(sar_id)
    if sar is None:
        raise HTTPException(status_code=404, detail=f"SAR '{sar_id}' not found")
    return sar
