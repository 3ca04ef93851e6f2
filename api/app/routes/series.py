from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from tradelists.session import TradeListSession

from ..dependencies import get_session
from ..schemas import StrategySeriesResponse

router = APIRouter(prefix="/api/v1/series", tags=["series"])


@router.get("/strategies", response_model=StrategySeriesResponse)
async def strategy_series(session: TradeListSession = Depends(get_session)) -> StrategySeriesResponse:
    series = session.strategy_series()
    return StrategySeriesResponse.model_validate(
        {"series": [asdict(s) for s in series], "overlay": session.overlay()}
    )
