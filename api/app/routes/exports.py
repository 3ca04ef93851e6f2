from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from tradelists.exports import CORRELATION_EXPORT_FILENAME
from tradelists.session import TradeListSession

from ..dependencies import get_session

router = APIRouter(prefix="/api/v1/export", tags=["exports"])


@router.get("/correlations")
async def export_correlations(session: TradeListSession = Depends(get_session)) -> Response:
    body = session.export_correlation()
    if body is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Select at least two strategies to export correlations",
        )
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{CORRELATION_EXPORT_FILENAME}"'},
    )
