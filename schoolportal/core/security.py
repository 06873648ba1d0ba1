# schoolportal/core/security.py

from datetime import datetime, timedelta, timezone
import secrets
from typing import Dict, Optional, Any
from jose import JWTError, jwt
from passlib.context import CryptContext

from schoolportal.core.config import settings, get_token_expires_delta
from schoolportal.core.errors import TokenError
from schoolportal.core.logging import logger
from schoolportal.schemas.enums import UserRole

class SecurityConfig:
    """Security configuration constants"""
    PASSWORD_ROUNDS = 12
    ACCESS_TOKEN_TYPE = "access"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__default_rounds=SecurityConfig.PASSWORD_ROUNDS
)

def get_password_hash(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash"""
    return pwd_context.verify(plain_password, hashed_password)

def create_access_token(
    user_id: int,
    role: UserRole,
    school_id: Optional[int] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create access token carrying the session claims"""
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or get_token_expires_delta())
    to_encode = {
        "sub": str(user_id),
        "role": role.value,
        "school_id": school_id,
        "type": SecurityConfig.ACCESS_TOKEN_TYPE,
        "iss": settings.TOKEN_ISSUER,
        "iat": issued_at,
        "exp": expire,
        "jti": secrets.token_urlsafe(32)
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify a JWT access token and return its payload.

    Raises:
        TokenError: if the signature, expiry, issuer or type is wrong
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            issuer=settings.TOKEN_ISSUER
        )
    except JWTError as e:
        logger.warning(f"Token verification failed: {str(e)}")
        raise TokenError()

    if payload.get("type") != SecurityConfig.ACCESS_TOKEN_TYPE or not payload.get("sub"):
        raise TokenError("Invalid token type")
    return payload

def token_ttl_seconds(payload: Dict[str, Any]) -> int:
    """Seconds until the token expires, never below one"""
    expires_at = int(payload.get("exp", 0))
    remaining = expires_at - int(datetime.now(timezone.utc).timestamp())
    return max(remaining, 1)

def strip_bearer(raw: Optional[str]) -> Optional[str]:
    """Accept ``Bearer <token>``, a quoted token or a bare token"""
    if not raw:
        return None
    token = raw.strip().strip('"')
    if token.lower().startswith("bearer "):
        token = token[7:].strip()
    return token or None
