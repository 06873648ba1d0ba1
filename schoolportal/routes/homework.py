from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from schoolportal.core.dependencies import get_teacher, get_tenant_session
from schoolportal.core.permissions import student_scope
from schoolportal.routes.marks import get_academic_service
from schoolportal.schemas.academics import HomeworkCreateRequest
from schoolportal.schemas.auth import SessionUser
from schoolportal.services.academic_service import AcademicService

router = APIRouter(tags=["Homework"])


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_homework(
    request: HomeworkCreateRequest,
    teacher: SessionUser = Depends(get_teacher),
    academic_service: AcademicService = Depends(get_academic_service)
) -> Dict[str, Any]:
    homework = await academic_service.create_homework(teacher, request)
    return {"message": "Homework created", "homework": homework}


@router.get("/list")
async def list_homeworks(
    class_id: Optional[int] = Query(None, alias="classId"),
    session_user: SessionUser = Depends(get_tenant_session),
    academic_service: AcademicService = Depends(get_academic_service)
) -> Dict[str, Any]:
    """Students see their own class's homework, nothing when unassigned"""
    own_id = student_scope(session_user)
    if own_id is not None:
        class_id = await academic_service.student_class_id(own_id)
        if class_id is None:
            return {"homeworks": []}
    return {"homeworks": await academic_service.list_homeworks(session_user.school_id, class_id)}
