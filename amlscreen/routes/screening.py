"""Screening endpoints for single and batch transaction processing."""

from collections import Counter

from fastapi import APIRouter, Request

from amlscreen.models import (
    BatchRequest,
    BatchResponse,
    BatchSummary,
    ScreeningOutcome,
    ScreeningRequest,
    ScreeningResult,
)
from amlscreen.screening.engine import AMLEngine

router = APIRouter(prefix="/api")


def _get_engine(request: Request) -> AMLEngine:
    """Retrieve the screening engine from application state."""
    return request.app.state.engine


@router.post("/screening", response_model=ScreeningOutcome)
async def screen_transaction(
    body: ScreeningRequest,
    request: Request,
) -> ScreeningOutcome:
    """Screen a single transaction for AML compliance."""
    engine = _get_engine(request)
    return await engine.screen_transaction(body.transaction, body.customer)


@router.post("/screening/batch", response_model=BatchResponse)
async def screen_batch(
    batch: BatchRequest,
    request: Request,
) -> BatchResponse:
    """Screen a batch of transactions and return an aggregate summary.

    Items are screened in order, so earlier items count toward the
    velocity window of later ones from the same customer. The summary
    includes the 5 most common flags.
    """
    engine = _get_engine(request)

    results: list[ScreeningOutcome] = []
    for item in batch.items:
        results.append(await engine.screen_transaction(item.transaction, item.customer))

    screened = [r for r in results if isinstance(r, ScreeningResult)]
    flag_counts = Counter(flag for r in screened for flag in r.flags)

    summary = BatchSummary(
        total=len(results),
        suspicious=sum(1 for r in screened if r.suspicious),
        failed=len(results) - len(screened),
        sars_filed=sum(1 for r in screened if r.sar_id is not None),
        common_flags=[flag for flag, _ in flag_counts.most_common(5)],
    )

    return BatchResponse(results=results, summary=summary)
