from __future__ import annotations

from fastapi import Depends, HTTPException, status

from tradelists.config import Settings
from tradelists.remote import RemoteSource, SupabaseSource
from tradelists.session import TradeListSession

from .services import session_store


def get_session() -> TradeListSession:
    return session_store.store


def get_app_settings() -> Settings:
    return session_store.settings


def get_remote_source(settings: Settings = Depends(get_app_settings)) -> RemoteSource:
    if not settings.remote_configured:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Remote source is not configured (set TRADELISTS_REMOTE_URL and TRADELISTS_REMOTE_KEY)",
        )
    return SupabaseSource(settings.remote_url, settings.remote_key, table=settings.remote_table)


def file_summaries(session: TradeListSession) -> list[dict]:
    metrics = session.metrics()
    selected = set(session.selected)
    return [
        {
            "filename": name,
            "row_count": table.row_count,
            "column_count": table.column_count,
            "selected": name in selected,
            "contract_multiplier": session.multiplier_for(name),
            "has_metrics": name in metrics,
        }
        for name, table in session.tables.items()
    ]
