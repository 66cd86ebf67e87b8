"""
Verifies bearer tokens and turns their claims into an ``AuthContext``.
"""

import logging
from typing import Any, Dict, List, Optional

import jwt

from realtime_broker.auth.tokens import JWT_ALGORITHM
from realtime_broker.config.constants import LOGGER_NAME
from realtime_broker.config.settings import EnvProvider, JwtSettings
from realtime_broker.errors import AuthError
from realtime_broker.models.auth import AuthContext

logger = logging.getLogger(LOGGER_NAME)


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class JwtVerifier:
    """Checks signature, issuer, audience and expiry of HS256 tokens."""

    def __init__(self, settings: JwtSettings):
        self.settings = settings

    def verify(self, token: str) -> AuthContext:
        """
        Verify ``token`` and extract the caller's identity.

        Raises:
            AuthError: If the token is invalid or lacks a subject
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.secret,
                algorithms=[JWT_ALGORITHM],
                audience=self.settings.audience,
                issuer=self.settings.issuer,
            )
        except jwt.PyJWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            raise AuthError(f"JWT verification failed: {e}") from e
        return self.parse_payload(payload)

    def parse_payload(self, payload: Dict[str, Any]) -> AuthContext:
        return AuthContext(
            userId=self._extract_user_id(payload),
            scopes=self._parse_scopes(payload.get("scope")),
            deviceId=self._optional_claim(payload, ["device_id", "deviceId"]),
            locale=self._optional_claim(payload, ["locale"]),
        )

    @staticmethod
    def _parse_scopes(scope_claim: Any) -> List[str]:
        if _non_empty_string(scope_claim):
            return scope_claim.split()
        return []

    @staticmethod
    def _extract_user_id(payload: Dict[str, Any]) -> str:
        # Older tokens carried the user in a "userId" claim
        for key in ("sub", "userId"):
            if _non_empty_string(payload.get(key)):
                return payload[key]
        raise AuthError('JWT payload missing "sub" claim')

    @staticmethod
    def _optional_claim(payload: Dict[str, Any], keys: List[str]) -> Optional[str]:
        for key in keys:
            if _non_empty_string(payload.get(key)):
                return payload[key]
        return None


def require_bearer_token(header_value: Optional[str]) -> str:
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header.

    Raises:
        AuthError: If the header is missing or not a bearer credential
    """
    if not header_value:
        raise AuthError("Missing Authorization header")
    scheme, _, token = header_value.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthError("Malformed Authorization header")
    return token


_verifier: Optional[JwtVerifier] = None


def get_jwt_verifier(provider: Optional[EnvProvider] = None) -> JwtVerifier:
    """
    Return the process-wide verifier, building it from the environment on first use.

    Raises:
        ConfigError: If any BFF_JWT_* variable is missing
    """
    global _verifier
    if _verifier is None:
        _verifier = JwtVerifier(JwtSettings.from_env(provider))
    return _verifier


def reset_jwt_verifier() -> None:
    global _verifier
    _verifier = None
