"""Service configuration."""

import logging
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


LOGGER = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration error."""


class Config(BaseSettings):
    """Service configuration."""

    model_config = SettingsConfigDict(env_file=".env")

    admin_principal: str
    auth: Literal["insecure", "client-tokens"] = "insecure"
    client_token_secret: str | None = None
    ledger_config: str | None = None
    genesis_block_height: int = 0
