from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.core.database import get_db
from schoolportal.core.dependencies import get_cache, get_school_admin, get_staff, get_tenant_session
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.school import ClassAssignRequest, ClassCreateRequest
from schoolportal.services.cache_service import CacheService
from schoolportal.services.class_service import ClassService

router = APIRouter(tags=["Class"])


def get_class_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache)
) -> ClassService:
    return ClassService(db, cache)


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_class(
    request: ClassCreateRequest,
    admin: SessionUser = Depends(get_school_admin),
    class_service: ClassService = Depends(get_class_service)
) -> Dict[str, Any]:
    class_ = await class_service.create_class(admin.school_id, request)
    return {"message": "Class created successfully", "class": class_}


@router.get("/list")
async def list_classes(
    session_user: SessionUser = Depends(get_tenant_session),
    class_service: ClassService = Depends(get_class_service)
) -> Dict[str, Any]:
    return {"classes": await class_service.list_classes(session_user.school_id)}


@router.get("/students")
async def list_class_students(
    class_id: int = Query(..., alias="classId"),
    session_user: SessionUser = Depends(get_staff),
    class_service: ClassService = Depends(get_class_service)
) -> Dict[str, Any]:
    return {"students": await class_service.list_class_students(session_user.school_id, class_id)}


@router.post("/{class_id}/assign")
async def assign_students(
    class_id: int,
    request: ClassAssignRequest,
    admin: SessionUser = Depends(get_school_admin),
    class_service: ClassService = Depends(get_class_service)
) -> Dict[str, Any]:
    count = await class_service.assign_students(admin.school_id, class_id, request.student_ids)
    return {"message": "Students assigned", "count": count}
