"""Models for representing endorsements."""

from dataclasses import dataclass
from enum import Enum


class Category(str, Enum):
    """Fixed set of endorsement categories."""

    COMMUNITY = "community"
    PROFESSIONAL = "professional"
    PERSONAL = "personal"


MIN_WEIGHT = 1
MAX_WEIGHT = 100


@dataclass
class Endorsement:
    """A stake-backed endorsement of one principal by another.

    Only `verified` and `active` ever change after creation, and each flips
    at most once.
    """

    id: int
    endorser: str
    endorsee: str
    stake_amount: int
    timestamp: int
    category: Category
    weight: int
    verified: bool = False
    active: bool = True

    @property
    def contribution(self) -> int:
        """Weighted stake this endorsement adds to the endorsee's score."""
        return self.weight * self.stake_amount if self.active else 0


@dataclass(frozen=True)
class Revocation:
    """Record of an endorsement revocation."""

    endorsement_id: int
    revoked_at: int
    reason: str
