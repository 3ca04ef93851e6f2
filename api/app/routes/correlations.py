from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from tradelists.session import TradeListSession

from ..dependencies import get_session
from ..schemas import CorrelationResponse

router = APIRouter(prefix="/api/v1", tags=["correlations"])


@router.get("/correlations", response_model=CorrelationResponse)
async def correlations(session: TradeListSession = Depends(get_session)) -> CorrelationResponse:
    result = session.correlation()
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Select at least two strategies to compute correlations",
        )
    return CorrelationResponse(**result.to_dict())
