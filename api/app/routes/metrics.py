from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tradelists.session import TradeListSession

from ..dependencies import get_session
from ..schemas import MetricsResponse, StrategyMetricsRow

router = APIRouter(prefix="/api/v1", tags=["metrics"])


@router.get("/metrics", response_model=MetricsResponse)
async def metrics(
    sort_key: Optional[str] = Query(default=None, description="StrategyMetrics field to sort by"),
    direction: str = Query(default="asc", pattern="^(asc|desc)$"),
    session: TradeListSession = Depends(get_session),
) -> MetricsResponse:
    try:
        rows = session.sorted_metrics(sort_key, direction)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return MetricsResponse(
        rows=[StrategyMetricsRow(**m.summary()) for m in rows],
        errors=session.errors,
    )
