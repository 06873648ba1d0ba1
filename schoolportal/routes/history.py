from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from schoolportal.core.dependencies import get_staff
from schoolportal.routes.student import get_student_service
from schoolportal.schemas.auth import SessionUser
from schoolportal.services.student_service import StudentService

router = APIRouter(tags=["History"])


@router.get("/student")
async def student_histories(
    original_student_id: Optional[int] = Query(None, alias="originalStudentId"),
    session_user: SessionUser = Depends(get_staff),
    student_service: StudentService = Depends(get_student_service)
) -> Dict[str, Any]:
    histories = await student_service.list_histories(session_user.school_id, original_student_id)
    return {"histories": histories}
