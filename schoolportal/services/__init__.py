from .cache_service import CacheKeys, CacheService
from .base_service import BaseService
from .auth_service import AuthService
from .tenant_service import TenantService
from .user_service import UserService
from .school_service import SchoolService
from .class_service import ClassService
from .student_service import StudentService
from .attendance_service import AttendanceService
from .academic_service import AcademicService
from .records_service import RecordsService
from .appointment_service import AppointmentService
from .leave_service import LeaveService
from .chat_relay import ConnectionManager

__all__ = [
    "CacheKeys",
    "CacheService",
    "BaseService",
    "AuthService",
    "TenantService",
    "UserService",
    "SchoolService",
    "ClassService",
    "StudentService",
    "AttendanceService",
    "AcademicService",
    "RecordsService",
    "AppointmentService",
    "LeaveService",
    "ConnectionManager"
]
