from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.core.database import get_db
from schoolportal.core.dependencies import get_cache, get_school_admin, get_teacher
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.enums import LeaveStatus
from schoolportal.schemas.leave import LeaveApplyRequest, LeaveDecisionRequest
from schoolportal.services.cache_service import CacheService
from schoolportal.services.leave_service import LeaveService

router = APIRouter(tags=["Leaves"])


def get_leave_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache)
) -> LeaveService:
    return LeaveService(db, cache)


@router.post("/apply", status_code=status.HTTP_201_CREATED)
async def apply_leave(
    request: LeaveApplyRequest,
    teacher: SessionUser = Depends(get_teacher),
    leave_service: LeaveService = Depends(get_leave_service)
) -> Dict[str, Any]:
    leave = await leave_service.apply(teacher, request)
    return {"message": "Leave applied successfully", "leave": leave}


@router.get("/my")
async def my_leaves(
    teacher: SessionUser = Depends(get_teacher),
    leave_service: LeaveService = Depends(get_leave_service)
) -> Dict[str, Any]:
    return {"leaves": await leave_service.my_leaves(teacher)}


@router.get("/all")
async def all_leaves(
    admin: SessionUser = Depends(get_school_admin),
    leave_service: LeaveService = Depends(get_leave_service)
) -> Dict[str, Any]:
    return {"leaves": await leave_service.all_leaves(admin.school_id)}


@router.get("/pending")
async def pending_leaves(
    admin: SessionUser = Depends(get_school_admin),
    leave_service: LeaveService = Depends(get_leave_service)
) -> Dict[str, Any]:
    return {"leaves": await leave_service.pending_leaves(admin.school_id)}


@router.post("/{leave_id}/approve")
async def approve_leave(
    leave_id: int,
    request: Optional[LeaveDecisionRequest] = Body(default=None),
    admin: SessionUser = Depends(get_school_admin),
    leave_service: LeaveService = Depends(get_leave_service)
) -> Dict[str, Any]:
    leave = await leave_service.decide(admin, leave_id, LeaveStatus.APPROVED, request)
    return {"message": "Leave approved", "leave": leave}


@router.post("/{leave_id}/reject")
async def reject_leave(
    leave_id: int,
    request: Optional[LeaveDecisionRequest] = Body(default=None),
    admin: SessionUser = Depends(get_school_admin),
    leave_service: LeaveService = Depends(get_leave_service)
) -> Dict[str, Any]:
    leave = await leave_service.decide(admin, leave_id, LeaveStatus.REJECTED, request)
    return {"message": "Leave rejected", "leave": leave}
