from .requests import StudentCreateRequest, StudentDeactivateRequest, FeeSetRequest
from .responses import (
    StudentResponse,
    StudentCreateResponse,
    StudentHistoryResponse,
    FeeResponse
)

__all__ = [
    'StudentCreateRequest',
    'StudentDeactivateRequest',
    'FeeSetRequest',
    'StudentResponse',
    'StudentCreateResponse',
    'StudentHistoryResponse',
    'FeeResponse'
]
