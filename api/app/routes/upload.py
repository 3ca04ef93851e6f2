from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from tradelists.session import TradeListSession

from ..dependencies import file_summaries, get_session
from ..schemas import UploadResponse

router = APIRouter(prefix="/api/v1", tags=["upload"])


@router.post("/upload", response_model=UploadResponse)
async def upload_files(
    files: List[UploadFile] = File(...),
    session: TradeListSession = Depends(get_session),
) -> UploadResponse:
    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files provided")

    batch = []
    rejected: list[str] = []
    for upload in files:
        if not upload.filename or not upload.filename.lower().endswith(".csv"):
            rejected.append(f"Error processing {upload.filename}: only .csv trade lists are accepted")
            continue
        raw = await upload.read()
        batch.append((upload.filename, raw.decode("utf-8-sig", errors="replace")))

    if not batch:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="; ".join(rejected))

    stored = session.ingest(batch)
    session.errors.extend(rejected)
    return UploadResponse(stored=stored, files=file_summaries(session), errors=session.errors)
