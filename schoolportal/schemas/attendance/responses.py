from datetime import date, datetime
from typing import Optional
from ..common.base import CamelModel
from ..enums import AttendanceStatus

class AttendanceResponse(CamelModel):
    id: int
    school_id: int
    class_id: int
    student_id: int
    marked_by_id: Optional[int] = None
    date: date
    period: int
    status: AttendanceStatus
    created_at: Optional[datetime] = None

class AttendanceMarkResponse(CamelModel):
    message: str
    count: int
