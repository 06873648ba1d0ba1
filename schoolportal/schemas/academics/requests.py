from datetime import date
from typing import Optional
from pydantic import Field, model_validator
from ..common.base import CamelModel

class MarkCreateRequest(CamelModel):
    student_id: int
    class_id: int
    subject: str = Field(min_length=1, max_length=100)
    marks: float = Field(ge=0)
    total_marks: float = Field(gt=0)
    suggestions: Optional[str] = None

    @model_validator(mode='after')
    def validate_marks(self) -> 'MarkCreateRequest':
        if self.marks > self.total_marks:
            raise ValueError("marks cannot exceed totalMarks")
        return self

class HomeworkCreateRequest(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    subject: Optional[str] = Field(default=None, max_length=100)
    class_id: int
    due_date: Optional[date] = None
