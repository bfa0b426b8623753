"""
Bearer token helpers.

Tokens carry the acting username (`sub`) and a role claim; the username is
what classification, journal and audit records store as their actor.
"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from finledger.app.core.config import settings


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a token for an actor.

    Args:
        data: Claims, at least `sub` and `role` (ADMIN, ACCOUNTANT or VIEWER)
        expires_delta: Lifetime; defaults to access_token_expire_minutes

    Example claims:
        {"sub": "jane.accountant", "user_id": 7, "role": "ACCOUNTANT"}
    """
    claims = dict(data)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims["exp"] = datetime.utcnow() + lifetime
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the claims of a valid, unexpired token, or None."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
