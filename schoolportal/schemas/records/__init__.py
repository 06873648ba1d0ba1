from .requests import NewsFeedRequest, CertificateCreateRequest
from .responses import NewsFeedResponse, CertificateStudent, CertificateResponse

__all__ = [
    'NewsFeedRequest',
    'CertificateCreateRequest',
    'NewsFeedResponse',
    'CertificateStudent',
    'CertificateResponse'
]
