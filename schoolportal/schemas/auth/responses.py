from typing import Optional
from ..common.base import CamelModel
from ..enums import UserRole

class SessionUser(CamelModel):
    """What every route knows about the caller"""
    user_id: int
    name: str
    email: str
    role: UserRole
    school_id: Optional[int] = None
    student_id: Optional[int] = None

class LoginResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: SessionUser

class SessionResponse(CamelModel):
    user: SessionUser
