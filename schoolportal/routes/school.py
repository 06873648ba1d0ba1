from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.core.database import get_db
from schoolportal.core.dependencies import get_cache, get_current_session, get_school_admin, require_roles
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.enums import UserRole
from schoolportal.schemas.school import SchoolCreateRequest, SchoolResponse, SchoolUpdateRequest
from schoolportal.services.cache_service import CacheService
from schoolportal.services.school_service import SchoolService
from schoolportal.services.tenant_service import TenantService

router = APIRouter(tags=["School"])


def get_school_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache)
) -> SchoolService:
    return SchoolService(db, cache)


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_school(
    request: SchoolCreateRequest,
    session_user: SessionUser = Depends(require_roles(UserRole.SCHOOLADMIN, tenant=False)),
    school_service: SchoolService = Depends(get_school_service)
) -> Dict[str, Any]:
    """A school admin without a school creates one and is assigned to it"""
    school = await school_service.create_school(session_user, request)
    return {
        "message": "School created successfully",
        "school": SchoolResponse.model_validate(school).to_json_dict()
    }


@router.put("/update")
async def update_school(
    request: SchoolUpdateRequest,
    session_user: SessionUser = Depends(get_school_admin),
    school_service: SchoolService = Depends(get_school_service)
) -> Dict[str, Any]:
    school = await school_service.update_school(session_user.school_id, request)
    return {
        "message": "School updated successfully",
        "school": SchoolResponse.model_validate(school).to_json_dict()
    }


@router.get("/mine")
async def my_school(
    session_user: SessionUser = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
    school_service: SchoolService = Depends(get_school_service)
) -> Dict[str, Any]:
    """The caller's school, or null when none is assigned yet"""
    school_id = await TenantService(db).resolve_school_id(session_user)
    if school_id is None:
        return {"school": None}
    return {"school": await school_service.get_my_school(school_id)}
