from datetime import datetime
from typing import Optional
from ..common.base import CamelModel
from ..user.responses import UserSummary

class SchoolResponse(CamelModel):
    id: int
    name: str
    address: Optional[str] = None
    location: Optional[str] = None
    admin_id: Optional[int] = None
    created_at: Optional[datetime] = None

class ClassSummary(CamelModel):
    id: int
    name: str
    section: Optional[str] = None

class ClassResponse(ClassSummary):
    school_id: int
    teacher_id: Optional[int] = None
    teacher: Optional[UserSummary] = None
    student_count: int = 0
    created_at: Optional[datetime] = None
