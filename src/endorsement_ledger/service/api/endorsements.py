"""Endorsement lifecycle endpoints."""

import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict

from endorsement_ledger.errors import EndorsementNotFoundError
from endorsement_ledger.models import Category
from endorsement_ledger.service.depends import LedgerDep
from endorsement_ledger.service.security import ContextDep

router = APIRouter(prefix="/endorsements", tags=["Endorsements"])
LOGGER = logging.getLogger(__name__)


class EndorseRequest(BaseModel):
    """Endorse request."""

    endorsee: str
    stake_amount: int
    category: str
    weight: int


class EndorseResponse(BaseModel):
    """Endorse response."""

    id: int
    endorsee: str
    score: int


class EndorsementInfo(BaseModel):
    """Endorsement details."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    endorser: str
    endorsee: str
    stake_amount: int
    timestamp: int
    category: Category
    weight: int
    verified: bool
    active: bool


class RevokeRequest(BaseModel):
    """Revoke request."""

    reason: str


class RevocationInfo(BaseModel):
    """Revocation details."""

    model_config = ConfigDict(from_attributes=True)

    endorsement_id: int
    revoked_at: int
    reason: str


@router.post("", summary="Stake on another principal")
async def post_endorsement(
    req: EndorseRequest, ledger: LedgerDep, ctx: ContextDep
) -> EndorseResponse:
    """Create an endorsement from the caller."""
    with ledger.atomic():
        endorsement_id = ledger.endorse_user(
            ctx, req.endorsee, req.stake_amount, req.category, req.weight
        )
        score = ledger.get_endorsee_score(req.endorsee)
    return EndorseResponse(id=endorsement_id, endorsee=req.endorsee, score=score)


@router.get("/{endorsement_id}", summary="Get an endorsement")
async def get_endorsement(endorsement_id: int, ledger: LedgerDep) -> EndorsementInfo:
    """Get an endorsement by id."""
    endorsement = ledger.get_endorsement(endorsement_id)
    if endorsement is None:
        raise EndorsementNotFoundError(f"No endorsement with id {endorsement_id}")
    return EndorsementInfo.model_validate(endorsement)


@router.get("/{endorsement_id}/revocation", summary="Get a revocation record")
async def get_revocation(endorsement_id: int, ledger: LedgerDep) -> RevocationInfo:
    """Get the revocation record of an endorsement."""
    revocation = ledger.get_revocation(endorsement_id)
    if revocation is None:
        raise HTTPException(404, f"Endorsement {endorsement_id} is not revoked")
    return RevocationInfo.model_validate(revocation)


@router.post("/{endorsement_id}/revoke", summary="Revoke an endorsement")
async def post_revoke(
    endorsement_id: int, req: RevokeRequest, ledger: LedgerDep, ctx: ContextDep
) -> RevocationInfo:
    """Revoke one of the caller's endorsements."""
    revocation = ledger.revoke_endorsement(ctx, endorsement_id, req.reason)
    return RevocationInfo.model_validate(revocation)


@router.post("/{endorsement_id}/verify", summary="Verify an endorsement")
async def post_verify(
    endorsement_id: int, ledger: LedgerDep, ctx: ContextDep
) -> EndorsementInfo:
    """Mark an endorsement verified (admin only)."""
    endorsement = ledger.verify_endorsement(ctx, endorsement_id)
    return EndorsementInfo.model_validate(endorsement)
