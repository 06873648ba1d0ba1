from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.core.database import get_db
from schoolportal.core.dependencies import get_cache, get_tenant_session
from schoolportal.schemas.auth import SessionUser
from schoolportal.services.cache_service import CacheService
from schoolportal.services.user_service import UserService

router = APIRouter(tags=["Teacher"])


@router.get("/list")
async def list_teachers(
    session_user: SessionUser = Depends(get_tenant_session),
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache)
) -> Dict[str, Any]:
    """Active teachers of the caller's school, by name"""
    return {"teachers": await UserService(db, cache).list_teachers(session_user.school_id)}
