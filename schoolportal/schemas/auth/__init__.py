from .requests import LoginRequest
from .responses import SessionUser, LoginResponse, SessionResponse

__all__ = ['LoginRequest', 'SessionUser', 'LoginResponse', 'SessionResponse']
