"""Endorsement ledger HTTP service."""

import logging.config
from os import getenv

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from endorsement_ledger.errors import (
    EndorsementError,
    EndorsementNotFoundError,
    NotAuthorizedError,
)
from endorsement_ledger.service.depends import lifespan

from .api import admin, endorsements, principals

LOG_LEVEL = getenv("LOG_LEVEL", "INFO")
logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "endorsement_ledger": {
                "handlers": ["default"],
                "level": LOG_LEVEL,
                "propagate": True,
            },
            "uvicorn": {
                "handlers": ["default"],
                "level": LOG_LEVEL,
                "propagate": True,
            },
        },
    }
)

app = FastAPI(
    title="Endorsement Ledger",
    summary="Stake-backed endorsements and reputation scores",
    openapi_tags=[
        {
            "name": "Endorsements",
            "description": "Endorsement creation, revocation and verification",
        },
        {
            "name": "Principals",
            "description": "Reputation scores, stake and principal verification",
        },
        {
            "name": "Config",
            "description": "Ledger parameters",
        },
        {
            "name": "Chain",
            "description": "Logical block clock",
        },
    ],
    lifespan=lifespan,
)


def status_for(error: EndorsementError) -> int:
    """Map a ledger error to an HTTP status."""
    if isinstance(error, NotAuthorizedError):
        return 403
    if isinstance(error, EndorsementNotFoundError):
        return 404
    return 400


@app.exception_handler(EndorsementError)
async def endorsement_error_handler(request: Request, error: EndorsementError):
    """Report rejected ledger operations with their stable code."""
    return JSONResponse(
        status_code=status_for(error),
        content={"error": error.kind, "code": int(error.code), "detail": error.message},
    )


app.include_router(endorsements.router)
app.include_router(principals.router)
app.include_router(admin.router)


def main():
    """Run the service under uvicorn."""
    uvicorn.run(
        app,
        host=getenv("HOST", "0.0.0.0"),
        port=int(getenv("PORT", "8080")),
        log_config=None,
    )
