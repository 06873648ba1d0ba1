# schemas/student/requests.py
from datetime import date
from typing import Optional
from pydantic import EmailStr, Field, model_validator
from ..common.base import CamelModel

class StudentCreateRequest(CamelModel):
    name: str = Field(min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    father_name: str = Field(min_length=2, max_length=255)
    phone_no: str = Field(min_length=7, max_length=20)
    aadhaar_no: str = Field(min_length=4, max_length=20)
    dob: date
    address: Optional[str] = None
    class_id: Optional[int] = None
    password: Optional[str] = Field(default=None, min_length=8, max_length=72)

class StudentDeactivateRequest(CamelModel):
    reason: Optional[str] = Field(default=None, max_length=1000)

class FeeSetRequest(CamelModel):
    student_id: int
    total_amount: float = Field(ge=0)
    paid_amount: float = Field(default=0, ge=0)
    due_date: Optional[date] = None

    @model_validator(mode='after')
    def validate_paid_amount(self) -> 'FeeSetRequest':
        if self.paid_amount > self.total_amount:
            raise ValueError("paidAmount cannot exceed totalAmount")
        return self
