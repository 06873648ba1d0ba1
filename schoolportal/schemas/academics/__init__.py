from .requests import MarkCreateRequest, HomeworkCreateRequest
from .responses import MarkResponse, HomeworkResponse

__all__ = ['MarkCreateRequest', 'HomeworkCreateRequest', 'MarkResponse', 'HomeworkResponse']
