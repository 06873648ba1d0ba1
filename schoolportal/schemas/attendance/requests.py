from datetime import date
from typing import List
from pydantic import Field, model_validator
from ..common.base import CamelModel
from ..enums import AttendanceStatus

class AttendanceEntry(CamelModel):
    student_id: int
    status: AttendanceStatus

class AttendanceMarkRequest(CamelModel):
    class_id: int
    date: date
    period: int = Field(default=1, ge=1, le=12)
    attendances: List[AttendanceEntry] = Field(min_length=1)

    @model_validator(mode='after')
    def validate_unique_students(self) -> 'AttendanceMarkRequest':
        student_ids = [entry.student_id for entry in self.attendances]
        if len(student_ids) != len(set(student_ids)):
            raise ValueError("Each student may appear only once per submission")
        return self
