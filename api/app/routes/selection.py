from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from tradelists.session import TradeListSession

from ..dependencies import get_session
from ..schemas import SelectionState, SelectionUpdate

router = APIRouter(prefix="/api/v1", tags=["selection"])


def _state(session: TradeListSession) -> SelectionState:
    return SelectionState(
        files=session.selected,
        start_date=session.date_range.start,
        end_date=session.date_range.end,
        starting_capital=session.starting_capital,
        normalize_equity=session.normalize_equity,
    )


@router.get("/selection", response_model=SelectionState)
async def get_selection(session: TradeListSession = Depends(get_session)) -> SelectionState:
    return _state(session)


@router.put("/selection", response_model=SelectionState)
async def update_selection(body: SelectionUpdate, session: TradeListSession = Depends(get_session)) -> SelectionState:
    try:
        session.select(body.files)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"File not found: {exc.args[0]}")
    session.set_date_range(body.start_date, body.end_date)
    if body.starting_capital is not None:
        session.starting_capital = body.starting_capital
    if body.normalize_equity is not None:
        session.normalize_equity = body.normalize_equity
    return _state(session)
