from datetime import date, datetime
from typing import Optional
from ..common.base import CamelModel
from ..user.responses import UserSummary
from ..school.responses import ClassSummary

class MarkResponse(CamelModel):
    id: int
    school_id: int
    class_id: int
    student_id: int
    teacher_id: Optional[int] = None
    subject: str
    marks: float
    total_marks: float
    suggestions: Optional[str] = None
    created_at: Optional[datetime] = None

class HomeworkResponse(CamelModel):
    id: int
    school_id: int
    class_id: int
    teacher_id: Optional[int] = None
    title: str
    description: str
    subject: Optional[str] = None
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None
    homework_class: Optional[ClassSummary] = None
    teacher: Optional[UserSummary] = None
