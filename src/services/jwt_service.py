"""
JWT Service for bearer token verification.

Access tokens are issued by Supabase Auth and signed with the project's JWT
secret (HS256). This service only verifies and decodes them; issuing tokens
is the auth provider's job. create_access_token exists for local development
and tests.
"""

import logging
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from pydantic import BaseModel, ValidationError

from core.config import SUPABASE_JWT_SECRET, SUPABASE_JWT_AUDIENCE

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """Claims we rely on from a Supabase access token."""
    sub: str  # Auth user ID
    email: str
    aud: Optional[str] = None
    role: Optional[str] = None  # Supabase role claim, usually "authenticated"
    iat: Optional[int] = None
    exp: Optional[int] = None


class JWTService:
    """Service for JWT token operations."""

    ALGORITHM = "HS256"
    DEV_TOKEN_EXPIRE_MINUTES = 60

    @classmethod
    def verify_token(cls, token: str) -> Optional[TokenPayload]:
        """Verify signature, expiry and audience, then decode the token."""
        try:
            payload = jwt.decode(
                token,
                SUPABASE_JWT_SECRET,
                algorithms=[cls.ALGORITHM],
                audience=SUPABASE_JWT_AUDIENCE,
            )
            return TokenPayload(**payload)
        except jwt.ExpiredSignatureError:
            logger.debug("Rejected expired token")
            return None
        except jwt.InvalidTokenError:
            return None
        except ValidationError:
            # Signed token missing sub/email
            logger.warning("Rejected token with incomplete claims")
            return None

    @classmethod
    def create_access_token(
        cls,
        user_id: str,
        email: str,
        expires_minutes: Optional[int] = None,
        extra_claims: Optional[Dict[str, Any]] = None
    ) -> str:
        """Create a token shaped like a Supabase access token."""
        now = datetime.now(timezone.utc)
        to_encode: Dict[str, Any] = {
            "sub": user_id,
            "email": email,
            "aud": SUPABASE_JWT_AUDIENCE,
            "role": "authenticated",
            "iat": now,
            "exp": now + timedelta(minutes=expires_minutes or cls.DEV_TOKEN_EXPIRE_MINUTES),
        }
        to_encode.update(extra_claims or {})
        return jwt.encode(to_encode, SUPABASE_JWT_SECRET, algorithm=cls.ALGORITHM)


# Global instance
jwt_service = JWTService()
