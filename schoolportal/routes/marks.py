from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.core.database import get_db
from schoolportal.core.dependencies import get_cache, get_teacher, get_tenant_session
from schoolportal.core.permissions import student_scope
from schoolportal.schemas.academics import MarkCreateRequest
from schoolportal.schemas.auth import SessionUser
from schoolportal.services.academic_service import AcademicService
from schoolportal.services.cache_service import CacheService

router = APIRouter(tags=["Marks"])


def get_academic_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache)
) -> AcademicService:
    return AcademicService(db, cache)


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_mark(
    request: MarkCreateRequest,
    teacher: SessionUser = Depends(get_teacher),
    academic_service: AcademicService = Depends(get_academic_service)
) -> Dict[str, Any]:
    mark = await academic_service.create_mark(teacher, request)
    return {"message": "Marks saved", "mark": mark}


@router.get("/list")
async def list_marks(
    student_id: Optional[int] = Query(None, alias="studentId"),
    session_user: SessionUser = Depends(get_tenant_session),
    academic_service: AcademicService = Depends(get_academic_service)
) -> Dict[str, Any]:
    own_id = student_scope(session_user)
    if own_id is not None:
        student_id = own_id
    return {"marks": await academic_service.list_marks(session_user.school_id, student_id)}
