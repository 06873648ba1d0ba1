from .requests import AppointmentCreateRequest, MessageCreateRequest
from .responses import AppointmentResponse, AppointmentCreateResponse, ChatMessageResponse

__all__ = [
    'AppointmentCreateRequest',
    'MessageCreateRequest',
    'AppointmentResponse',
    'AppointmentCreateResponse',
    'ChatMessageResponse'
]
