import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from redis import asyncio as aioredis
from redis.exceptions import RedisError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolportal.core.errors import AuthenticationError, InvalidCredentialsException, TokenError
from schoolportal.core.logging import logger
from schoolportal.core.redis import REVOKED_TOKEN_PREFIX
from schoolportal.core.security import (
    create_access_token,
    decode_access_token,
    token_ttl_seconds,
    verify_password
)
from schoolportal.models import User
from schoolportal.schemas.auth import SessionUser


class SecurityLogging:
    """Secure logging utilities for authentication events"""

    @staticmethod
    def sanitize_token(token_or_msg: str) -> str:
        """Remove JWTs from strings before they reach the logs"""
        if not token_or_msg:
            return token_or_msg
        return re.sub(r'eyJ[\w-]*\.[\w-]*\.[\w-]*', '[REDACTED_TOKEN]', str(token_or_msg))

    @staticmethod
    def log_auth_event(
        event_type: str,
        user_id: Optional[int] = None,
        error: Optional[Exception] = None,
        **kwargs
    ) -> None:
        log_data: Dict[str, Any] = {
            "event": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
        if user_id:
            log_data["user_id"] = user_id
        if error:
            log_data["error_type"] = error.__class__.__name__
            log_data["error"] = SecurityLogging.sanitize_token(str(error))
        for key, value in kwargs.items():
            log_data[key] = SecurityLogging.sanitize_token(value) if isinstance(value, str) else value

        message = f"Auth event: {event_type}"
        if error:
            logger.warning(message, extra=log_data)
        else:
            logger.info(message, extra=log_data)


class AuthService:
    def __init__(self, db: AsyncSession, redis: Optional[aioredis.Redis] = None):
        self.db = db
        self.redis = redis

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.student_profile))
            .where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.student_profile))
            .where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def build_session_user(user: User) -> SessionUser:
        return SessionUser(
            user_id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            school_id=user.school_id,
            student_id=user.student_profile.id if user.student_profile else None
        )

    async def login(self, email: str, password: str) -> Tuple[str, SessionUser]:
        """Check credentials and issue an access token"""
        user = await self.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            SecurityLogging.log_auth_event("login_failed", email=email)
            raise InvalidCredentialsException()
        if not user.is_active:
            SecurityLogging.log_auth_event("login_inactive", user_id=user.id)
            raise AuthenticationError("Account is inactive", error_code="ACCOUNT_INACTIVE")

        token = create_access_token(user.id, user.role, user.school_id)
        SecurityLogging.log_auth_event("login_success", user_id=user.id, role=user.role.value)
        return token, self.build_session_user(user)

    async def is_revoked(self, jti: Optional[str]) -> bool:
        if not jti or self.redis is None:
            return False
        try:
            return bool(await self.redis.exists(f"{REVOKED_TOKEN_PREFIX}:{jti}"))
        except RedisError as e:
            logger.warning(f"Revocation check skipped, Redis unavailable: {str(e)}")
            return False

    async def logout(self, token: str) -> None:
        """Revoke the token id until the token would have expired anyway"""
        payload = decode_access_token(token)
        jti = payload.get("jti")
        if jti and self.redis is not None:
            try:
                await self.redis.set(
                    f"{REVOKED_TOKEN_PREFIX}:{jti}",
                    payload.get("sub", ""),
                    ex=token_ttl_seconds(payload)
                )
            except RedisError as e:
                logger.error(f"Failed to revoke token: {str(e)}")
                raise
        elif jti:
            logger.warning("Token not revoked, Redis unavailable; it stays valid until expiry")
        SecurityLogging.log_auth_event("logout", user_id=int(payload["sub"]))

    async def resolve_session(self, token: str) -> SessionUser:
        """Turn a bearer token into a fresh SessionUser"""
        payload = decode_access_token(token)
        if await self.is_revoked(payload.get("jti")):
            raise TokenError("Token has been revoked")

        try:
            user_id = int(payload["sub"])
        except (KeyError, ValueError):
            raise TokenError()

        user = await self.get_user_by_id(user_id)
        if not user:
            raise TokenError("Invalid token - User not found")
        if not user.is_active:
            raise AuthenticationError("Account is inactive", error_code="ACCOUNT_INACTIVE")
        return self.build_session_user(user)
