from .requests import AttendanceEntry, AttendanceMarkRequest
from .responses import AttendanceResponse, AttendanceMarkResponse

__all__ = [
    'AttendanceEntry',
    'AttendanceMarkRequest',
    'AttendanceResponse',
    'AttendanceMarkResponse'
]
