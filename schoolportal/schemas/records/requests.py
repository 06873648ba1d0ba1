from typing import Optional
from pydantic import Field
from ..common.base import CamelModel

class NewsFeedRequest(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    media_url: Optional[str] = Field(default=None, max_length=1024)
    media_type: Optional[str] = Field(default=None, max_length=50)

class CertificateCreateRequest(CamelModel):
    student_id: int
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    certificate_type: Optional[str] = Field(default=None, max_length=50)
