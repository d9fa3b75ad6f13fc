# customer_service/auth.py
"""
Bearer-token identity for customer and admin routes.

Tokens are issued by the auth service; this module only verifies them and
extracts the owner id and role.
"""
from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from fastapi import Depends, HTTPException, Request

from customer_service.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: uuid.UUID
    role: str = "customer"
    email: Optional[str] = None


def decode_token(token: str, settings: Settings) -> Optional[Dict[str, Any]]:
    """Verify signature and expiry; None if the token is not acceptable."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
    except InvalidTokenError as e:
        logger.warning(f"Invalid JWT token: {e}")
    return None


def identity_from_claims(claims: Dict[str, Any]) -> Optional[Identity]:
    raw_id = claims.get("user_id") or claims.get("sub")
    try:
        user_id = uuid.UUID(str(raw_id))
    except (TypeError, ValueError):
        return None
    return Identity(user_id=user_id, role=str(claims.get("role") or "customer"), email=claims.get("email"))


def get_identity(request: Request) -> Identity:
    """FastAPI dependency: 401 unless a valid bearer token names a user."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")

    settings: Settings = request.app.state.settings
    claims = decode_token(token.strip(), settings)
    if claims is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    identity = identity_from_claims(claims)
    if identity is None:
        raise HTTPException(status_code=401, detail="User ID not found")
    return identity


def get_current_user_id(identity: Identity = Depends(get_identity)) -> uuid.UUID:
    return identity.user_id


def require_admin(request: Request, identity: Identity = Depends(get_identity)) -> Identity:
    settings: Settings = request.app.state.settings
    allowed = set(settings.admin_roles)
    if identity.role.lower() not in allowed:
        raise HTTPException(status_code=403, detail="Forbidden: Insufficient role permissions")
    return identity
