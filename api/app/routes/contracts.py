from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from tradelists.session import TradeListSession

from ..dependencies import get_session
from ..schemas import ContractsResponse, ContractUpdate

router = APIRouter(prefix="/api/v1/contracts", tags=["contracts"])


def _snapshot(session: TradeListSession) -> ContractsResponse:
    return ContractsResponse(multipliers={name: session.multiplier_for(name) for name in session.tables})


@router.get("", response_model=ContractsResponse)
async def list_contracts(session: TradeListSession = Depends(get_session)) -> ContractsResponse:
    return _snapshot(session)


@router.post("/master", response_model=ContractsResponse)
async def apply_master(body: ContractUpdate, session: TradeListSession = Depends(get_session)) -> ContractsResponse:
    session.apply_master(body.value)
    return _snapshot(session)


@router.put("/{filename}", response_model=ContractsResponse)
async def set_contract(
    filename: str,
    body: ContractUpdate,
    session: TradeListSession = Depends(get_session),
) -> ContractsResponse:
    try:
        session.set_contract(filename, body.value)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return _snapshot(session)
