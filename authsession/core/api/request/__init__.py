"""Request descriptors, building and response handling."""
from .models import ApiRequest, ApiResponse
from .request_builder import RequestBuilder
from .response_handler import ResponseHandler

__all__ = [
    'ApiRequest',
    'ApiResponse',
    'RequestBuilder',
    'ResponseHandler',
]
