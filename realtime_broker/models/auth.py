"""
Pydantic models for dev token issuance and verified identities.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from realtime_broker.config.constants import DEFAULT_DEV_SCOPES


class DevTokenRequest(BaseModel):
    """Body of POST /api/auth/token.

    Every field is optional and malformed values fall back to their defaults,
    so a sloppy dev client still gets a token.
    """

    userId: str = "dev-user"
    deviceId: str = "dev-device"
    scopes: List[str] = Field(default_factory=lambda: list(DEFAULT_DEV_SCOPES))
    locale: Optional[str] = None

    @field_validator("userId", "deviceId", mode="before")
    def default_identity(cls, v, info):
        if v is None:
            return cls.model_fields[info.field_name].default
        return v if isinstance(v, str) else str(v)

    @field_validator("scopes", mode="before")
    def default_scopes(cls, v):
        if not isinstance(v, list):
            return list(DEFAULT_DEV_SCOPES)
        return [scope if isinstance(scope, str) else str(scope) for scope in v]

    @field_validator("locale", mode="before")
    def drop_invalid_locale(cls, v):
        return v if isinstance(v, str) else None


class DevTokenResponse(BaseModel):
    token: str
    expiresInSeconds: int


class AuthContext(BaseModel):
    """Identity extracted from a verified bearer token."""

    userId: str
    scopes: List[str] = Field(default_factory=list)
    deviceId: Optional[str] = None
    locale: Optional[str] = None
