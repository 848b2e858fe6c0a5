"""Request and response descriptors exchanged with the transport."""
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class ApiRequest:
    """
    Abstract description of one backend call.
    
    The same descriptor is re-sent unchanged when a request is retried,
    only the bearer token differs between attempts.
    
    Attributes:
        method: HTTP method
        path: Path relative to the API base URL, e.g. ``/auth/me``
        json: Optional JSON body
        params: Optional query string parameters
        headers: Extra request headers
        authenticated: Attach the bearer token and recover from 401
    """
    method: str
    path: str
    json: Any = None
    params: Optional[Mapping[str, Any]] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    authenticated: bool = True
    
    @classmethod
    def get(cls, path: str, **kwargs) -> 'ApiRequest':
        return cls('GET', path, **kwargs)
    
    @classmethod
    def post(cls, path: str, json: Any = None, **kwargs) -> 'ApiRequest':
        return cls('POST', path, json=json, **kwargs)
    
    def __repr__(self) -> str:
        # Bodies may carry passwords or refresh tokens
        return f"ApiRequest({self.method} {self.path})"


@dataclass
class ApiResponse:
    """
    Backend response as seen by the session layer.
    
    Attributes:
        status: HTTP status code
        data: Decoded JSON body, raw text, or None for an empty body
        headers: Response headers
    """
    status: int
    data: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    
    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300
    
    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401
