"""Auth backend API module."""
from .config import APIConfig, ProxyConfig, SSLConfig, TimeoutConfig
from .request import ApiRequest, ApiResponse, RequestBuilder, ResponseHandler
from .async_client import AsyncAPIClient
from .async_auth import (
    AsyncAuthService,
    AuthResult,
    LoginCredentials,
    RegisterCredentials
)
from .refresh import RefreshCoordinator
from .pipeline import RequestPipeline

__all__ = [
    # Transport
    'AsyncAPIClient',
    'ApiRequest',
    'ApiResponse',
    'RequestBuilder',
    'ResponseHandler',
    
    # Auth endpoints
    'AsyncAuthService',
    'AuthResult',
    'LoginCredentials',
    'RegisterCredentials',
    
    # Session recovery
    'RefreshCoordinator',
    'RequestPipeline',
    
    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
]
