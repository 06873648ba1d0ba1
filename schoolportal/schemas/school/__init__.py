# schoolportal/schemas/school/__init__.py
from .requests import (
    SchoolCreateRequest,
    SchoolUpdateRequest,
    ClassCreateRequest,
    ClassAssignRequest
)
from .responses import SchoolResponse, ClassSummary, ClassResponse

__all__ = [
    'SchoolCreateRequest',
    'SchoolUpdateRequest',
    'ClassCreateRequest',
    'ClassAssignRequest',
    'SchoolResponse',
    'ClassSummary',
    'ClassResponse'
]
