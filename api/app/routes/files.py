from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from tradelists.session import TradeListSession

from ..dependencies import file_summaries, get_session
from ..schemas import FileSummary

router = APIRouter(prefix="/api/v1", tags=["files"])


@router.get("/files", response_model=list[FileSummary])
async def list_files(session: TradeListSession = Depends(get_session)) -> list[FileSummary]:
    return file_summaries(session)


@router.delete("/files/{filename}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(filename: str, session: TradeListSession = Depends(get_session)) -> Response:
    try:
        session.remove(filename)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/files/{filename}/export")
async def export_file(filename: str, session: TradeListSession = Depends(get_session)) -> Response:
    try:
        download_name, body = session.export_cleaned(filename)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{download_name}"'},
    )
