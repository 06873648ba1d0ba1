from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator
from ..common.base import CamelModel

class AppointmentCreateRequest(CamelModel):
    teacher_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None
    note: Optional[str] = Field(default=None, max_length=2000)

class MessageCreateRequest(CamelModel):
    appointment_id: Optional[int] = None
    content: Optional[str] = Field(default=None, max_length=5000)

    @field_validator('content')
    @classmethod
    def strip_content(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None
