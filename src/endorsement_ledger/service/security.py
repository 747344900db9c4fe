"""Caller identification."""

from typing import Annotated

from fastapi import Depends, Request

from endorsement_ledger.ledger import Context
from endorsement_ledger.service.depends import AuthDep, ClockDep


async def caller(request: Request, auth: AuthDep) -> str:
    """Identify the calling principal."""
    return await auth.caller(request)


CallerDep = Annotated[str, Depends(caller)]


async def context(principal: CallerDep, clock: ClockDep) -> Context:
    """Build the ledger context for this request."""
    return Context(caller=principal, block_height=clock.height)


ContextDep = Annotated[Context, Depends(context)]
