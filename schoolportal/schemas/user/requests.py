from typing import Optional
from pydantic import EmailStr, Field
from ..common.base import CamelModel
from ..enums import UserRole

class SignupRequest(CamelModel):
    name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    role: UserRole
    mobile: Optional[str] = Field(default=None, max_length=20)
