# schoolportal/schemas/enums.py
from enum import Enum


class UserRole(str, Enum):
    SUPERADMIN = "SUPERADMIN"
    SCHOOLADMIN = "SCHOOLADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class AppointmentStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"


class LeaveStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LeaveType(str, Enum):
    CASUAL = "CASUAL"
    SICK = "SICK"
    PAID = "PAID"
    UNPAID = "UNPAID"


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
