from datetime import datetime
from typing import Optional
from ..common.base import CamelModel
from ..user.responses import UserSummary

class NewsFeedResponse(CamelModel):
    id: int
    school_id: int
    title: str
    description: str
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[UserSummary] = None

class CertificateStudent(CamelModel):
    id: int
    user: Optional[UserSummary] = None

class CertificateResponse(CamelModel):
    id: int
    school_id: int
    student_id: int
    title: str
    description: Optional[str] = None
    certificate_type: Optional[str] = None
    issued_date: Optional[datetime] = None
    student: Optional[CertificateStudent] = None
    issued_by: Optional[UserSummary] = None
