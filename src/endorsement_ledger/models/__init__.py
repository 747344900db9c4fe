"""Ledger entity models."""

from .endorsement import MAX_WEIGHT, MIN_WEIGHT, Category, Endorsement, Revocation

__all__ = [
    "Category",
    "Endorsement",
    "MAX_WEIGHT",
    "MIN_WEIGHT",
    "Revocation",
]
