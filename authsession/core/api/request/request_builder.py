"""Request builder for backend calls."""
from typing import Any, Dict, Optional

from .models import ApiRequest
from ..config import APIConfig


class RequestBuilder:
    """Turns an ApiRequest into aiohttp ``request()`` arguments."""
    
    def __init__(self, config: APIConfig):
        """Initializes request builder."""
        self.config = config
    
    def build_url(self, request: ApiRequest) -> str:
        """Builds request URL."""
        return self.config.build_url(request.path)
    
    def build_headers(
        self,
        request: ApiRequest,
        access_token: Optional[str] = None
    ) -> Dict[str, str]:
        """Builds request headers, adding the bearer credential if given."""
        headers = dict(request.headers)
        if request.json is not None:
            headers.setdefault('Content-Type', 'application/json')
        if access_token:
            headers['Authorization'] = f"Bearer {access_token}"
        return headers
    
    def build_kwargs(
        self,
        request: ApiRequest,
        access_token: Optional[str] = None
    ) -> Dict[str, Any]:
        """Builds keyword arguments for ``ClientSession.request``."""
        kwargs: Dict[str, Any] = {
            'headers': self.build_headers(request, access_token),
        }
        if request.json is not None:
            kwargs['json'] = request.json
        if request.params:
            kwargs['params'] = dict(request.params)
        if self.config.proxy:
            kwargs.update(self.config.proxy.request_kwargs())
        return kwargs
