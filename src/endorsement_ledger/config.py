"""Ledger configuration."""

import logging
import os
import tomllib
from pathlib import Path
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


LOGGER = logging.getLogger(__name__)


class ConfigFileNotFoundError(Exception):
    """Raised on configuration file not found."""


class LedgerParams(BaseModel):
    """Admin-mutable ledger parameters.

    Instances are immutable; the ledger's admin setters swap in an updated
    copy. `score_decay_factor`, `min_endorsers` and `score_threshold` are
    stored for consumers outside the ledger and are not read by any ledger
    operation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_stake_amount: int = Field(default=100, gt=0)
    max_stake_amount: int = Field(default=10000, gt=0)
    stake_lock_period: int = Field(default=144, gt=0)
    score_decay_factor: int = Field(default=95, gt=0, le=100)
    min_endorsers: int = Field(default=3, gt=0)
    max_endorsers_per_user: int = Field(default=50, gt=0)
    score_threshold: int = Field(default=500, gt=0)
    verification_required: bool = True

    @model_validator(mode="after")
    def _check_bounds(self) -> Self:
        if self.max_stake_amount <= self.min_stake_amount:
            raise ValueError("max_stake_amount must exceed min_stake_amount")
        if self.max_endorsers_per_user <= self.min_endorsers:
            raise ValueError("max_endorsers_per_user must exceed min_endorsers")
        return self

    @staticmethod
    def search_default_config_locations() -> Path:
        """Find the first readable config file in the well known locations."""
        user = os.getuid()
        for path in (
            "/run/secrets/ledger.toml",
            "/run/ledger.toml",
            "/ledger.toml",
            "/etc/endorsement-ledger/ledger.toml",
        ):
            path = Path(path)
            if not path.exists():
                continue
            if not path.is_file():
                continue
            if path.stat().st_uid != user and not (path.stat().st_mode & 0o004):
                continue

            LOGGER.debug("Loading ledger config from %s", path)
            return path

        raise ConfigFileNotFoundError("Could not find ledger.toml")

    @classmethod
    def from_config_file(cls, path: Path | str | None = None) -> "LedgerParams":
        """Load from a config file.

        The parameters may sit at the top level of the file or under a
        `[params]` table.
        """
        if isinstance(path, str):
            path = Path(path)
        elif path is None:
            path = cls.search_default_config_locations()

        if not path.is_file():
            raise ConfigFileNotFoundError(f"Could not find {path}")

        with path.open("rb") as f:
            raw = tomllib.load(f)

        return cls.model_validate(raw.get("params", raw))
