from .requests import SignupRequest
from .responses import UserSummary, TeacherResponse, UserResponse

__all__ = ['SignupRequest', 'UserSummary', 'TeacherResponse', 'UserResponse']
