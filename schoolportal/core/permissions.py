# schoolportal/core/permissions.py
from typing import Dict, Optional, Set

from schoolportal.core.errors import PermissionDenied
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.enums import UserRole

# Which roles each role may create through /admin/signup
SIGNUP_GRANTS: Dict[UserRole, Set[UserRole]] = {
    UserRole.SUPERADMIN: {UserRole.SCHOOLADMIN},
    UserRole.SCHOOLADMIN: {UserRole.TEACHER, UserRole.STUDENT},
    UserRole.TEACHER: set(),
    UserRole.STUDENT: set(),
}


def can_create_role(creator: UserRole, target: UserRole) -> bool:
    return target in SIGNUP_GRANTS.get(creator, set())


def student_scope(session_user: SessionUser) -> Optional[int]:
    """Student id a caller is confined to, or None for staff"""
    if session_user.role == UserRole.STUDENT:
        if session_user.student_id is None:
            raise PermissionDenied("Student profile not found")
        return session_user.student_id
    return None
