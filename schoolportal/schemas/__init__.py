# schoolportal/schemas/__init__.py

# Import enums
from .enums import UserRole, AppointmentStatus, LeaveStatus, LeaveType, AttendanceStatus

# Import common schemas
from .common import CamelModel, ErrorResponse

# Import auth schemas
from .auth import LoginRequest, SessionUser, LoginResponse, SessionResponse

# Import user schemas
from .user import SignupRequest, UserSummary, TeacherResponse, UserResponse

# Import school and class schemas
from .school import (
    SchoolCreateRequest,
    SchoolUpdateRequest,
    ClassCreateRequest,
    ClassAssignRequest,
    SchoolResponse,
    ClassSummary,
    ClassResponse
)

# Import student schemas
from .student import (
    StudentCreateRequest,
    StudentDeactivateRequest,
    FeeSetRequest,
    StudentResponse,
    StudentCreateResponse,
    StudentHistoryResponse,
    FeeResponse
)

# Import academic schemas
from .attendance import AttendanceEntry, AttendanceMarkRequest, AttendanceResponse, AttendanceMarkResponse
from .academics import MarkCreateRequest, HomeworkCreateRequest, MarkResponse, HomeworkResponse
from .records import (
    NewsFeedRequest,
    CertificateCreateRequest,
    NewsFeedResponse,
    CertificateStudent,
    CertificateResponse
)

# Import communication and leave schemas
from .communication import (
    AppointmentCreateRequest,
    MessageCreateRequest,
    AppointmentResponse,
    AppointmentCreateResponse,
    ChatMessageResponse
)
from .leave import LeaveApplyRequest, LeaveDecisionRequest, LeaveResponse, LeaveDetailResponse

__all__ = [
    'UserRole', 'AppointmentStatus', 'LeaveStatus', 'LeaveType', 'AttendanceStatus',
    'CamelModel', 'ErrorResponse',
    'LoginRequest', 'SessionUser', 'LoginResponse', 'SessionResponse',
    'SignupRequest', 'UserSummary', 'TeacherResponse', 'UserResponse',
    'SchoolCreateRequest', 'SchoolUpdateRequest', 'ClassCreateRequest', 'ClassAssignRequest',
    'SchoolResponse', 'ClassSummary', 'ClassResponse',
    'StudentCreateRequest', 'StudentDeactivateRequest', 'FeeSetRequest', 'StudentResponse',
    'StudentCreateResponse', 'StudentHistoryResponse', 'FeeResponse',
    'AttendanceEntry', 'AttendanceMarkRequest', 'AttendanceResponse', 'AttendanceMarkResponse',
    'MarkCreateRequest', 'HomeworkCreateRequest', 'MarkResponse', 'HomeworkResponse',
    'NewsFeedRequest', 'CertificateCreateRequest', 'NewsFeedResponse', 'CertificateStudent',
    'CertificateResponse',
    'AppointmentCreateRequest', 'MessageCreateRequest', 'AppointmentResponse',
    'AppointmentCreateResponse', 'ChatMessageResponse',
    'LeaveApplyRequest', 'LeaveDecisionRequest', 'LeaveResponse', 'LeaveDetailResponse'
]
