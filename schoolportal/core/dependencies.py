from typing import Callable, Awaitable, Optional

from fastapi import Depends, Request
from redis import asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.core.database import get_db
from schoolportal.core.errors import AuthenticationError, PermissionDenied
from schoolportal.core.redis import get_redis
from schoolportal.core.security import strip_bearer
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.enums import UserRole
from schoolportal.services.auth_service import AuthService
from schoolportal.services.cache_service import CacheService
from schoolportal.services.tenant_service import TenantService

ACCESS_TOKEN_COOKIE = "access_token"


# Service providers
async def get_cache(redis: Optional[aioredis.Redis] = Depends(get_redis)) -> Optional[CacheService]:
    """Provide the cache-aside accessor; None sends reads straight to the database"""
    if redis is None:
        return None
    return CacheService(redis)

async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis)
) -> AuthService:
    """Provide AuthService instance"""
    return AuthService(db, redis)


def extract_token(request: Request) -> Optional[str]:
    """Authorization header first, then the access_token cookie"""
    token = strip_bearer(request.headers.get("Authorization"))
    if token:
        return token
    return strip_bearer(request.cookies.get(ACCESS_TOKEN_COOKIE))


# User authentication and authorization
async def get_current_session(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
) -> SessionUser:
    token = extract_token(request)
    if not token:
        raise AuthenticationError("Unauthorized")
    session_user = await auth_service.resolve_session(token)
    request.state.user_id = session_user.user_id
    return session_user


async def get_tenant_session(
    session_user: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db)
) -> SessionUser:
    """
    Session whose ``school_id`` is guaranteed. School admins missing the field
    are repaired from the school they own before anything else runs.
    """
    school_id = await TenantService(db).resolve_school_id(session_user)
    if school_id is None:
        raise PermissionDenied("School not found in session")
    if school_id != session_user.school_id:
        session_user = session_user.model_copy(update={"school_id": school_id})
    return session_user


def require_roles(*roles: UserRole, tenant: bool = True) -> Callable[..., Awaitable[SessionUser]]:
    """Factory for role-based dependencies; tenant scoping is on by default"""
    allowed = set(roles)
    base_dependency = get_tenant_session if tenant else get_current_session

    async def role_dependency(
        session_user: SessionUser = Depends(base_dependency)
    ) -> SessionUser:
        if session_user.role not in allowed:
            raise PermissionDenied(
                f"Role {session_user.role.value} may not perform this action"
            )
        return session_user
    return role_dependency


# Role-specific dependencies
get_school_admin = require_roles(UserRole.SCHOOLADMIN)
get_teacher = require_roles(UserRole.TEACHER)
get_student = require_roles(UserRole.STUDENT)
get_staff = require_roles(UserRole.SCHOOLADMIN, UserRole.TEACHER)
