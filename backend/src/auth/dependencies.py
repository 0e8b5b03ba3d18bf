# pyright: reportMissingTypeStubs=false
"""
Authentication and authorization dependencies for FastAPI.

Provides dependency injection functions that turn the bearer token issued by
the external auth service into a `Principal`, plus role guards.
"""

import logging
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.constants import ROLES
from services.jwt_service import jwt_service, TokenPayload
from shared_types import Principal

logger = logging.getLogger(__name__)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenPayload]:
    """Extract and validate JWT token payload."""
    if not credentials:
        return None

    return jwt_service.verify_token(credentials.credentials)


def get_current_principal(
    payload: Optional[TokenPayload] = Depends(get_token_payload)
) -> Principal:
    """Get the authenticated principal from the JWT token."""
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials not provided"
        )

    if payload.role not in ROLES:
        logger.warning(f"Rejected token with unknown role '{payload.role}' for user {payload.user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied"
        )

    return Principal(id=payload.user_id, role=payload.role)


def require_admin_role(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Require admin role."""
    if not principal.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return principal


def require_staff_role(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Require doctor or admin role."""
    if not (principal.is_doctor or principal.is_admin):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Doctor or admin access required"
        )
    return principal
