from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tradelists.remote import RemoteFetchError, RemoteSource
from tradelists.session import TradeListSession

from ..dependencies import get_remote_source, get_session
from ..schemas import RemoteFetchResponse

router = APIRouter(prefix="/api/v1/remote", tags=["remote"])

logger = logging.getLogger(__name__)


@router.post("/fetch", response_model=RemoteFetchResponse)
async def fetch_remote(
    overwrite: bool = Query(default=False, description="Replace tables that are already loaded"),
    source: RemoteSource = Depends(get_remote_source),
    session: TradeListSession = Depends(get_session),
) -> RemoteFetchResponse:
    try:
        remote_files = source.fetch()
    except RemoteFetchError as exc:
        logger.warning("Remote fetch failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Remote fetch error: {exc}")
    stored = session.ingest_remote(remote_files, overwrite=overwrite)
    return RemoteFetchResponse(stored=stored, errors=session.errors)
