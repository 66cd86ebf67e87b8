"""
Environment-backed settings for the realtime broker.

Settings are read through an ``EnvProvider`` so tests can pass a plain dict
instead of patching ``os.environ``.
"""

import os
from dataclasses import dataclass
from typing import List, Optional, Protocol

from realtime_broker.config.constants import (
    DEFAULT_REALTIME_MODEL,
    DEFAULT_RESPONSES_MODEL,
)
from realtime_broker.errors import ConfigError


class EnvProvider(Protocol):
    """Anything with a mapping-style ``get``."""

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]: ...


def _env(provider: Optional[EnvProvider]) -> EnvProvider:
    return os.environ if provider is None else provider


def _require(provider: EnvProvider, keys: List[str]) -> List[str]:
    missing = [key for key in keys if not provider.get(key)]
    if missing:
        hint = " Add it to your .env file." if "OPENAI_API_KEY" in missing else ""
        raise ConfigError(f"Missing required env vars: {', '.join(missing)}.{hint}")
    return [provider.get(key) for key in keys]


@dataclass(frozen=True)
class OpenAIConfig:
    """Credentials and model choices for OpenAI calls."""

    api_key: str
    realtime_model: str = DEFAULT_REALTIME_MODEL
    responses_model: str = DEFAULT_RESPONSES_MODEL
    project_id: Optional[str] = None

    @classmethod
    def from_env(cls, provider: Optional[EnvProvider] = None) -> "OpenAIConfig":
        env = _env(provider)
        (api_key,) = _require(env, ["OPENAI_API_KEY"])
        return cls(
            api_key=api_key,
            realtime_model=env.get("OPENAI_REALTIME_MODEL") or DEFAULT_REALTIME_MODEL,
            responses_model=env.get("OPENAI_RESPONSES_MODEL") or DEFAULT_RESPONSES_MODEL,
            project_id=env.get("OPENAI_PROJECT_ID") or None,
        )


@dataclass(frozen=True)
class JwtSettings:
    """HS256 signing material shared by token issuance and verification."""

    secret: str
    audience: str
    issuer: str

    @classmethod
    def from_env(cls, provider: Optional[EnvProvider] = None) -> "JwtSettings":
        env = _env(provider)
        secret, audience, issuer = _require(
            env, ["BFF_JWT_SECRET", "BFF_JWT_AUDIENCE", "BFF_JWT_ISSUER"]
        )
        return cls(secret=secret, audience=audience, issuer=issuer)


def openai_key_configured(provider: Optional[EnvProvider] = None) -> bool:
    return bool(_env(provider).get("OPENAI_API_KEY"))


def cors_allow_origin(provider: Optional[EnvProvider] = None) -> str:
    value = (_env(provider).get("CORS_ALLOW_ORIGIN") or "").strip()
    return value or "*"


def dev_tokens_allowed(provider: Optional[EnvProvider] = None) -> bool:
    """Dev tokens are always available outside production."""
    env = _env(provider)
    if (env.get("ENVIRONMENT") or "").lower() != "production":
        return True
    return env.get("BFF_ALLOW_DEV_TOKENS") == "true"


def creative_log_path(provider: Optional[EnvProvider] = None) -> str:
    return _env(provider).get("CREATIVE_SANDBOX_LOG") or "logs/creative_sandbox.log"


def relay_auth_required(provider: Optional[EnvProvider] = None) -> bool:
    """When set, /ws connections without a bearer token are rejected."""
    return _env(provider).get("BFF_REQUIRE_AUTH") == "true"
