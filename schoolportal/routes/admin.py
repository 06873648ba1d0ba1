from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.core.database import get_db
from schoolportal.core.dependencies import get_cache, get_current_session
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.user import SignupRequest, UserResponse
from schoolportal.services.cache_service import CacheService
from schoolportal.services.tenant_service import TenantService
from schoolportal.services.user_service import UserService

router = APIRouter(tags=["Admin"])


def get_user_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache)
) -> UserService:
    return UserService(db, cache)


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignupRequest,
    session_user: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    """
    Create an account one level down the hierarchy.

    Super admins create school admins; school admins create the teachers and
    students of their school.
    """
    school_id = await TenantService(db).resolve_school_id(session_user)
    if school_id != session_user.school_id:
        session_user = session_user.model_copy(update={"school_id": school_id})

    user = await user_service.signup(session_user, request)
    return {
        "message": "User created successfully",
        "user": UserResponse.model_validate(user).to_json_dict()
    }
