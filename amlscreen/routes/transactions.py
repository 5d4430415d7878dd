"""Recent customer activity lookup endpoint."""

from typing import List

from fastapi import APIRouter, Request

from amlscreen.models import HistoryEntry
from amlscreen.screening.engine import AMLEngine

router = APIRouter(prefix="/api")


def _get_engine(request: Request) -> AMLEngine:
    """Retrieve the screening engine from application state."""
    return request.app.state.engine


@router.get("/transactions/{customer_id}", response_model=List[HistoryEntry])
async def get_customer_transactions(
    customer_id: str,
    request: Request,
) -> List[HistoryEntry]:
    """Get a customer's transactions inside the current velocity window.

    URL-encoded ids are automatically decoded by FastAPI.
    """
    return _get_engine(request).get_recent_transactions(customer_id)
