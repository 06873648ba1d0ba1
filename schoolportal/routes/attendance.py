from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.core.database import get_db
from schoolportal.core.dependencies import get_cache, get_teacher, get_tenant_session
from schoolportal.core.permissions import student_scope
from schoolportal.schemas.attendance import AttendanceMarkRequest, AttendanceMarkResponse
from schoolportal.schemas.auth import SessionUser
from schoolportal.services.attendance_service import AttendanceService
from schoolportal.services.cache_service import CacheService

router = APIRouter(tags=["Attendance"])


def get_attendance_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache)
) -> AttendanceService:
    return AttendanceService(db, cache)


@router.post("/mark", status_code=status.HTTP_201_CREATED)
async def mark_attendance(
    request: AttendanceMarkRequest,
    teacher: SessionUser = Depends(get_teacher),
    attendance_service: AttendanceService = Depends(get_attendance_service)
) -> Dict[str, Any]:
    count = await attendance_service.mark_attendance(teacher, request)
    return AttendanceMarkResponse(message="Attendance saved", count=count).to_json_dict()


@router.get("/list")
async def list_attendance(
    class_id: Optional[int] = Query(None, alias="classId"),
    on_date: Optional[date] = Query(None, alias="date"),
    session_user: SessionUser = Depends(get_tenant_session),
    attendance_service: AttendanceService = Depends(get_attendance_service)
) -> Dict[str, Any]:
    """Students only ever see their own rows"""
    attendances = await attendance_service.list_attendance(
        session_user.school_id,
        class_id=class_id,
        on_date=on_date,
        student_id=student_scope(session_user)
    )
    return {"attendances": attendances}
