"""Authentication modes."""

from secrets import token_urlsafe
from uuid import uuid4

import jwt
from fastapi import HTTPException, Request
from fastapi.security import APIKeyHeader, HTTPBearer
from pydantic import BaseModel, ConfigDict, ValidationError

from endorsement_ledger.service.config import Config, ConfigError


class InsecureMode:
    """Trust the principal named in the X-Principal header.

    This is for testing and for hosts that authenticate upstream; do not
    expose it directly.
    """

    HEADER = APIKeyHeader(name="x-principal", auto_error=False)

    async def caller(self, request: Request) -> str:
        """Identify the caller."""
        principal = await self.HEADER(request)
        if not principal:
            raise HTTPException(401, "Missing X-Principal header")
        return principal


class ClientToken(BaseModel):
    """Client token payload."""

    model_config = ConfigDict(extra="ignore")

    jti: str
    sub: str
    nonce: str


class ClientTokens:
    """Identify callers by the subject of an HS256 bearer token."""

    BEARER = HTTPBearer(auto_error=False)

    def __init__(self, secret: str):
        """Token auth."""
        self.secret = secret

    async def caller(self, request: Request) -> str:
        """Identify the caller."""
        token = await self.BEARER(request)
        if token is None:
            raise HTTPException(401, "Missing bearer token")

        try:
            payload = jwt.decode(
                token.credentials,
                self.secret,
                algorithms=["HS256"],
            )
            parsed = ClientToken.model_validate(payload)
        except (jwt.InvalidTokenError, ValidationError) as error:
            raise HTTPException(401, "Invalid token") from error

        return parsed.sub


def auth_provider(config: Config) -> InsecureMode | ClientTokens:
    """Provide authentication mechanism based on config."""
    if config.auth == "insecure":
        return InsecureMode()
    elif config.auth == "client-tokens":
        if config.client_token_secret is None:
            raise ConfigError(
                "auth mode is client-tokens but client_token_secret is not set"
            )
        return ClientTokens(config.client_token_secret)
    else:
        raise ConfigError(f"Invalid auth mode {config.auth}")


def issue_client_token(secret: str, principal: str) -> str:
    """Issue a bearer token identifying a principal."""
    return jwt.encode(
        payload={"jti": str(uuid4()), "sub": principal, "nonce": token_urlsafe()},
        key=secret,
        algorithm="HS256",
    )
