"""Ledger configuration and chain endpoints."""

import logging
from typing import Callable, Dict

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from endorsement_ledger.config import LedgerParams
from endorsement_ledger.errors import NotAuthorizedError
from endorsement_ledger.ledger import Context, EndorsementLedger
from endorsement_ledger.service.clock import ClockRegressionError
from endorsement_ledger.service.depends import ClockDep, LedgerDep
from endorsement_ledger.service.security import ContextDep

router = APIRouter()
LOGGER = logging.getLogger(__name__)

Setter = Callable[[EndorsementLedger, Context, int | bool], LedgerParams]

SETTERS: Dict[str, Setter] = {
    "min_stake_amount": EndorsementLedger.set_min_stake_amount,
    "max_stake_amount": EndorsementLedger.set_max_stake_amount,
    "stake_lock_period": EndorsementLedger.set_stake_lock_period,
    "score_decay_factor": EndorsementLedger.set_score_decay_factor,
    "min_endorsers": EndorsementLedger.set_min_endorsers,
    "max_endorsers_per_user": EndorsementLedger.set_max_endorsers_per_user,
    "score_threshold": EndorsementLedger.set_score_threshold,
    "verification_required": EndorsementLedger.set_verification_required,
}


class ParamUpdate(BaseModel):
    """New value for a ledger parameter."""

    value: bool | int


class LedgerInfo(BaseModel):
    """Ledger overview."""

    admin_principal: str
    next_endorsement_id: int
    contract_balance: int
    block_height: int


class AdvanceRequest(BaseModel):
    """Move the block clock forward, by a number of blocks or to a height."""

    blocks: int = Field(default=1, ge=0)
    height: int | None = None


class ChainInfo(BaseModel):
    """Block clock state."""

    block_height: int


@router.get("/info", tags=["Config"], summary="Ledger overview")
async def get_info(ledger: LedgerDep, clock: ClockDep) -> LedgerInfo:
    """Return admin, id counter, balance and block height."""
    return LedgerInfo(
        admin_principal=ledger.admin_principal,
        next_endorsement_id=ledger.next_endorsement_id,
        contract_balance=ledger.contract_balance,
        block_height=clock.height,
    )


@router.get("/admin/params", tags=["Config"], summary="Get ledger parameters")
async def get_params(ledger: LedgerDep) -> LedgerParams:
    """Return the current ledger parameters."""
    return ledger.params


@router.put("/admin/params/{name}", tags=["Config"], summary="Set a parameter")
async def put_param(
    name: str, req: ParamUpdate, ledger: LedgerDep, ctx: ContextDep
) -> LedgerParams:
    """Update one ledger parameter (admin only)."""
    setter = SETTERS.get(name)
    if setter is None:
        raise HTTPException(404, f"Unknown parameter {name}")

    expects_bool = name == "verification_required"
    if isinstance(req.value, bool) != expects_bool:
        kind = "a boolean" if expects_bool else "an integer"
        raise HTTPException(422, f"{name} must be {kind}")

    return setter(ledger, ctx, req.value)


@router.post("/chain/advance", tags=["Chain"], summary="Advance the block clock")
async def post_advance(
    req: AdvanceRequest, ledger: LedgerDep, clock: ClockDep, ctx: ContextDep
) -> ChainInfo:
    """Move the logical block height forward (admin only)."""
    if ctx.caller != ledger.admin_principal:
        raise NotAuthorizedError(f"{ctx.caller} is not the ledger admin")

    try:
        if req.height is not None:
            height = clock.set(req.height)
        else:
            height = clock.advance(req.blocks)
    except ClockRegressionError as error:
        raise HTTPException(400, str(error)) from error

    LOGGER.info("Block clock advanced to %d", height)
    return ChainInfo(block_height=height)
