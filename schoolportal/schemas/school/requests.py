from typing import List, Optional
from pydantic import Field
from ..common.base import CamelModel

class SchoolCreateRequest(CamelModel):
    name: str = Field(min_length=2, max_length=255)
    address: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)

class SchoolUpdateRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    address: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)

class ClassCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    section: Optional[str] = Field(default=None, max_length=20)
    teacher_id: Optional[int] = None

class ClassAssignRequest(CamelModel):
    student_ids: List[int] = Field(min_length=1)
