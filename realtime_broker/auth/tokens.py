"""
Issues short-lived HS256 tokens for local development clients.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import jwt

from realtime_broker.config.constants import DEV_TOKEN_TTL_SECONDS
from realtime_broker.config.settings import JwtSettings

JWT_ALGORITHM = "HS256"


def issue_dev_token(
    settings: JwtSettings,
    user_id: str,
    device_id: str,
    scopes: List[str],
    locale: Optional[str] = None,
    ttl_seconds: int = DEV_TOKEN_TTL_SECONDS,
) -> str:
    """
    Sign a token carrying the user as ``sub`` and scopes as a space-joined ``scope``.

    Args:
        settings: Secret, audience and issuer to sign with
        user_id: Subject of the token
        device_id: Stored in the ``device_id`` claim
        scopes: Granted scopes
        locale: Optional ``locale`` claim
        ttl_seconds: Lifetime of the token

    Returns:
        The encoded JWT
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iss": settings.issuer,
        "aud": settings.audience,
        "iat": now,
        "exp": now + timedelta(seconds=ttl_seconds),
        "scope": " ".join(scopes),
        "device_id": device_id,
    }
    if locale:
        payload["locale"] = locale
    return jwt.encode(payload, settings.secret, algorithm=JWT_ALGORITHM)
