from datetime import datetime
from typing import Optional
from ..common.base import CamelModel
from ..enums import AppointmentStatus

class AppointmentResponse(CamelModel):
    id: int
    student_id: int
    teacher_id: int
    school_id: int
    status: AppointmentStatus
    note: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class AppointmentCreateResponse(CamelModel):
    message: str
    appointment: AppointmentResponse

class ChatMessageResponse(CamelModel):
    id: int
    appointment_id: int
    sender_id: int
    content: str
    created_at: Optional[datetime] = None
