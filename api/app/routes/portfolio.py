from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from tradelists.session import TradeListSession

from ..dependencies import get_session
from ..schemas import PortfolioResponse

router = APIRouter(prefix="/api/v1", tags=["portfolio"])


@router.get("/portfolio", response_model=PortfolioResponse)
async def portfolio(session: TradeListSession = Depends(get_session)) -> PortfolioResponse:
    result = session.portfolio()
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No strategies selected")
    return PortfolioResponse.model_validate(result.to_dict())
