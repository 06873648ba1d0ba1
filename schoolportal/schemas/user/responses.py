from datetime import datetime
from typing import Optional
from ..common.base import CamelModel
from ..enums import UserRole

class UserSummary(CamelModel):
    id: int
    name: str
    email: Optional[str] = None

class TeacherResponse(UserSummary):
    mobile: Optional[str] = None

class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    mobile: Optional[str] = None
    role: UserRole
    school_id: Optional[int] = None
    is_active: bool
    created_at: Optional[datetime] = None
