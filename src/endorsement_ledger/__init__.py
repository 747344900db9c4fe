"""Stake-backed endorsement ledger."""

from .config import ConfigFileNotFoundError, LedgerParams
from .errors import EndorsementError, ErrorCode, error_for
from .ledger import Context, EndorsementLedger, LedgerState
from .models import Category, Endorsement, Revocation

__all__ = [
    "Category",
    "ConfigFileNotFoundError",
    "Context",
    "Endorsement",
    "EndorsementError",
    "EndorsementLedger",
    "ErrorCode",
    "LedgerParams",
    "LedgerState",
    "Revocation",
    "error_for",
]
