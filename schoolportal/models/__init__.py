from .base import Base, TenantModel
from .school import School
from .user import User
from .class_ import Class
from .student import Student, StudentHistory
from .attendance import Attendance
from .academics import Mark, Homework
from .records import NewsFeed, Certificate, StudentFee
from .communication import Appointment, ChatMessage
from .leave import LeaveRequest

__all__ = [
    'Base',
    'TenantModel',
    'School',
    'User',
    'Class',
    'Student',
    'StudentHistory',
    'Attendance',
    'Mark',
    'Homework',
    'NewsFeed',
    'Certificate',
    'StudentFee',
    'Appointment',
    'ChatMessage',
    'LeaveRequest'
]
