from datetime import date, datetime
from typing import Optional
from ..common.base import CamelModel
from ..enums import LeaveStatus, LeaveType
from ..user.responses import TeacherResponse, UserSummary

class LeaveResponse(CamelModel):
    id: int
    school_id: int
    teacher_id: int
    approver_id: Optional[int] = None
    leave_type: LeaveType
    reason: Optional[str] = None
    from_date: date
    to_date: date
    status: LeaveStatus
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None

class LeaveDetailResponse(LeaveResponse):
    teacher: Optional[TeacherResponse] = None
    approver: Optional[UserSummary] = None
