from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.core.database import get_db
from schoolportal.core.dependencies import get_cache, get_student, get_teacher, get_tenant_session
from schoolportal.core.errors import ValidationError
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.communication import (
    AppointmentCreateRequest,
    AppointmentCreateResponse,
    MessageCreateRequest
)
from schoolportal.services.appointment_service import AppointmentService
from schoolportal.services.cache_service import CacheService

router = APIRouter(tags=["Communication"])


def get_appointment_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache)
) -> AppointmentService:
    return AppointmentService(db, cache)


@router.get("/appointments")
async def list_appointments(
    session_user: SessionUser = Depends(get_tenant_session),
    appointment_service: AppointmentService = Depends(get_appointment_service)
) -> Dict[str, Any]:
    return {"appointments": await appointment_service.list_appointments(session_user)}


@router.post("/appointments", status_code=status.HTTP_201_CREATED)
async def create_appointment(
    request: AppointmentCreateRequest,
    student: SessionUser = Depends(get_student),
    appointment_service: AppointmentService = Depends(get_appointment_service)
) -> Dict[str, Any]:
    """A student asks a teacher of their school for an appointment"""
    appointment = await appointment_service.create_appointment(student, request)
    return AppointmentCreateResponse.model_validate(
        {"message": "Appointment requested", "appointment": appointment}
    ).to_json_dict()


@router.post("/appointments/{appointment_id}/approve")
async def approve_appointment(
    appointment_id: int,
    teacher: SessionUser = Depends(get_teacher),
    appointment_service: AppointmentService = Depends(get_appointment_service)
) -> Dict[str, Any]:
    appointment = await appointment_service.approve(teacher, appointment_id)
    return {"message": "Appointment approved", "appointment": appointment}


@router.post("/appointments/{appointment_id}/reject")
async def reject_appointment(
    appointment_id: int,
    teacher: SessionUser = Depends(get_teacher),
    appointment_service: AppointmentService = Depends(get_appointment_service)
) -> Dict[str, Any]:
    appointment = await appointment_service.reject(teacher, appointment_id)
    return {"message": "Appointment rejected", "appointment": appointment}


@router.post("/appointments/{appointment_id}/complete")
async def complete_appointment(
    appointment_id: int,
    teacher: SessionUser = Depends(get_teacher),
    appointment_service: AppointmentService = Depends(get_appointment_service)
) -> Dict[str, Any]:
    appointment = await appointment_service.complete(teacher, appointment_id)
    return {"message": "Appointment completed", "appointment": appointment}


@router.get("/messages")
async def list_messages(
    appointment_id: Optional[int] = Query(None, alias="appointmentId"),
    session_user: SessionUser = Depends(get_tenant_session),
    appointment_service: AppointmentService = Depends(get_appointment_service)
) -> Dict[str, Any]:
    if appointment_id is None:
        raise ValidationError("appointmentId is required")
    return {"messages": await appointment_service.list_messages(session_user, appointment_id)}


@router.post("/messages", status_code=status.HTTP_201_CREATED)
async def post_message(
    request: MessageCreateRequest,
    session_user: SessionUser = Depends(get_tenant_session),
    appointment_service: AppointmentService = Depends(get_appointment_service)
) -> Dict[str, Any]:
    """Stored only; live delivery goes through the chat socket"""
    return await appointment_service.post_message(session_user, request)
