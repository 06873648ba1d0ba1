from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.core.database import get_db
from schoolportal.core.dependencies import get_cache, get_school_admin, get_staff
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.student import (
    StudentCreateRequest,
    StudentCreateResponse,
    StudentDeactivateRequest,
    StudentHistoryResponse,
    StudentResponse
)
from schoolportal.services.cache_service import CacheService
from schoolportal.services.student_service import StudentService

router = APIRouter(tags=["Student"])


def get_student_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache)
) -> StudentService:
    return StudentService(db, cache)


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_student(
    request: StudentCreateRequest,
    admin: SessionUser = Depends(get_school_admin),
    student_service: StudentService = Depends(get_student_service)
) -> Dict[str, Any]:
    student, temporary_password = await student_service.create_student(admin, request)
    return StudentCreateResponse(
        message="Student created successfully",
        student=StudentResponse.model_validate(student),
        temporary_password=temporary_password
    ).to_json_dict()


@router.get("/list")
async def list_students(
    session_user: SessionUser = Depends(get_staff),
    student_service: StudentService = Depends(get_student_service)
) -> Dict[str, Any]:
    return {"students": await student_service.list_students(session_user.school_id)}


@router.delete("/{student_id}")
async def deactivate_student(
    student_id: int,
    request: Optional[StudentDeactivateRequest] = Body(default=None),
    admin: SessionUser = Depends(get_school_admin),
    student_service: StudentService = Depends(get_student_service)
) -> Dict[str, Any]:
    """Disable the student's login and keep a history snapshot"""
    history = await student_service.deactivate_student(
        admin,
        student_id,
        reason=request.reason if request else None
    )
    return {
        "message": "Student deactivated",
        "history": StudentHistoryResponse.model_validate(history).to_json_dict()
    }
