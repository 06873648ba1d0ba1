# schemas/student/responses.py
from datetime import date, datetime
from typing import Optional
from ..common.base import CamelModel
from ..user.responses import UserSummary
from ..school.responses import ClassSummary

class StudentResponse(CamelModel):
    id: int
    user_id: int
    school_id: int
    class_id: Optional[int] = None
    father_name: Optional[str] = None
    aadhaar_no: Optional[str] = None
    phone_no: Optional[str] = None
    dob: Optional[date] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    student_class: Optional[ClassSummary] = None

class StudentCreateResponse(CamelModel):
    message: str
    student: StudentResponse
    temporary_password: Optional[str] = None

class StudentHistoryResponse(CamelModel):
    id: int
    school_id: int
    original_student_id: int
    name: str
    email: Optional[str] = None
    class_name: Optional[str] = None
    father_name: Optional[str] = None
    reason: Optional[str] = None
    deactivated_at: Optional[datetime] = None

class FeeResponse(CamelModel):
    id: int
    student_id: int
    school_id: int
    total_amount: float
    paid_amount: float
    balance: float
    due_date: Optional[date] = None
    updated_at: Optional[datetime] = None
