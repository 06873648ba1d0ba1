from .base import CamelModel
from .error import ErrorResponse

__all__ = ['CamelModel', 'ErrorResponse']
