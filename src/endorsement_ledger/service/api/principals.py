"""Principal and stake endpoints."""

from typing import List

from fastapi import APIRouter
from pydantic import BaseModel

from endorsement_ledger.ledger import EndorsementLedger
from endorsement_ledger.service.depends import LedgerDep
from endorsement_ledger.service.security import ContextDep

router = APIRouter(tags=["Principals"])


class PrincipalInfo(BaseModel):
    """Reputation and stake of a principal."""

    principal: str
    score: int
    stake: int
    verified: bool
    endorsements: List[int]


class ScoreResponse(BaseModel):
    """Recomputed score."""

    principal: str
    score: int


class WithdrawRequest(BaseModel):
    """Stake withdrawal request."""

    amount: int


class StakeResponse(BaseModel):
    """Remaining stake after a withdrawal."""

    principal: str
    stake: int


def principal_info(ledger: EndorsementLedger, principal: str) -> PrincipalInfo:
    """Collect the ledger's view of a principal."""
    return PrincipalInfo(
        principal=principal,
        score=ledger.get_endorsee_score(principal),
        stake=ledger.get_endorser_stake(principal),
        verified=ledger.get_verification_status(principal),
        endorsements=ledger.get_endorsee_endorsements(principal),
    )


@router.get("/principals/{principal}", summary="Get a principal's reputation")
async def get_principal(principal: str, ledger: LedgerDep) -> PrincipalInfo:
    """Get score, stake and verification status."""
    return principal_info(ledger, principal)


@router.post("/principals/{principal}/score", summary="Recompute a score")
async def post_score(principal: str, ledger: LedgerDep) -> ScoreResponse:
    """Recompute and cache a principal's score."""
    return ScoreResponse(
        principal=principal, score=ledger.update_endorsee_score(principal)
    )


@router.post("/principals/{principal}/verify", summary="Verify a principal")
async def post_verify_principal(
    principal: str, ledger: LedgerDep, ctx: ContextDep
) -> PrincipalInfo:
    """Mark a principal verified (admin only)."""
    ledger.verify_user(ctx, principal)
    return principal_info(ledger, principal)


@router.post("/stake/withdraw", summary="Withdraw released stake")
async def post_withdraw(
    req: WithdrawRequest, ledger: LedgerDep, ctx: ContextDep
) -> StakeResponse:
    """Withdraw from the caller's committed stake."""
    remaining = ledger.withdraw_stake(ctx, req.amount)
    return StakeResponse(principal=ctx.caller, stake=remaining)
