"""Application dependencies."""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI
from rich.console import Console
from rich.table import Table

from endorsement_ledger.config import ConfigFileNotFoundError, LedgerParams
from endorsement_ledger.ledger import EndorsementLedger
from endorsement_ledger.service.auth import ClientTokens, InsecureMode, auth_provider
from endorsement_ledger.service.clock import BlockClock
from endorsement_ledger.service.config import Config

LOGGER = logging.getLogger(__name__)

config: Config | None = None
ledger: EndorsementLedger | None = None
clock: BlockClock | None = None
auth: InsecureMode | ClientTokens | None = None


def load_params(config: Config) -> LedgerParams:
    """Load ledger params from the configured file or the default locations."""
    try:
        return LedgerParams.from_config_file(config.ledger_config)
    except ConfigFileNotFoundError:
        if config.ledger_config is not None:
            raise
        LOGGER.info("No ledger.toml found; using default ledger params")
        return LedgerParams()


def print_params(console: Console, admin: str, params: LedgerParams):
    """Pretty print the effective ledger configuration."""
    table = Table(title="Ledger Configuration", show_header=True, header_style="bold")
    table.add_column("Parameter")
    table.add_column("Value")
    table.add_row("admin_principal", admin)
    for name, value in params.model_dump().items():
        table.add_row(name, str(value))
    console.print("\n")
    console.print(table)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Setup dependencies"""
    global config, ledger, clock, auth

    # Loads configuration from environment
    config = Config()  # type: ignore
    auth = auth_provider(config)
    params = load_params(config)

    ledger = EndorsementLedger(config.admin_principal, params)
    clock = BlockClock(config.genesis_block_height)

    print_params(Console(width=90), config.admin_principal, params)
    yield
    LOGGER.info(
        "Shutting down at block %d with %d endorsements",
        clock.height,
        ledger.next_endorsement_id,
    )


def get_config() -> Config:
    """Retrieve config."""
    global config
    if config is None:
        raise RuntimeError("config is not set; did startup fail?")

    return config


ConfigDep = Annotated[Config, Depends(get_config)]


def get_ledger() -> EndorsementLedger:
    """Retrieve the ledger.

    This is intended to be called by FastAPI.Depends.
    """
    global ledger
    if ledger is None:
        raise RuntimeError("Ledger is not set; did startup fail?")

    return ledger


LedgerDep = Annotated[EndorsementLedger, Depends(get_ledger)]


def get_clock() -> BlockClock:
    """Retrieve the block clock."""
    global clock
    if clock is None:
        raise RuntimeError("Clock is not set; did startup fail?")

    return clock


ClockDep = Annotated[BlockClock, Depends(get_clock)]


def get_auth() -> InsecureMode | ClientTokens:
    """Retrieve the authentication mode."""
    global auth
    if auth is None:
        raise RuntimeError("Auth is not set; did startup fail?")

    return auth


AuthDep = Annotated[InsecureMode | ClientTokens, Depends(get_auth)]
