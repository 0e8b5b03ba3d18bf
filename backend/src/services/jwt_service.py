"""
JWT Service for access token validation.

Tokens are issued by the external auth service; this service decodes them into
the caller's principal. `create_access_token` exists for local development and
tests, using the same shared secret.
"""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from pydantic import BaseModel

from core.config import JWT_ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, JWT_SECRET_KEY


class TokenPayload(BaseModel):
    """Payload structure for JWT tokens."""
    user_id: int  # Patient ID, doctor ID or admin user ID depending on role
    role: str  # "patient", "doctor" or "admin"
    iat: Optional[int] = None  # Set by JWT service
    exp: Optional[int] = None  # Set by JWT service


class JWTService:
    """Service for JWT token operations."""

    ALGORITHM = JWT_ALGORITHM
    ACCESS_TOKEN_EXPIRE_MINUTES = JWT_ACCESS_TOKEN_EXPIRE_MINUTES

    @classmethod
    def create_access_token(cls, payload: TokenPayload, expires_in_minutes: Optional[int] = None) -> str:
        """Create a JWT access token."""
        to_encode = payload.model_dump(exclude={"iat", "exp"})
        now = datetime.now(timezone.utc)
        expire = now + timedelta(minutes=expires_in_minutes or cls.ACCESS_TOKEN_EXPIRE_MINUTES)
        to_encode.update({"exp": expire, "iat": now})
        return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=cls.ALGORITHM)

    @classmethod
    def verify_token(cls, token: str) -> Optional[TokenPayload]:
        """Verify and decode a JWT token."""
        try:
            payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[cls.ALGORITHM])
            return TokenPayload(**payload)
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None
        except ValueError:
            # Signature is valid but the claims do not match TokenPayload
            return None


# Global instance
jwt_service = JWTService()
