"""
Auth module: dev token issuance and bearer token verification (HS256).
"""

from realtime_broker.auth.jwt_verifier import JwtVerifier, get_jwt_verifier, require_bearer_token
from realtime_broker.auth.tokens import issue_dev_token

__all__ = ["JwtVerifier", "get_jwt_verifier", "issue_dev_token", "require_bearer_token"]
