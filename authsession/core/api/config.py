"""
Backend client configuration.

APIConfig says where the auth backend lives and how to reach it. The
location can come from the environment (AUTHSESSION_API_URL and
AUTHSESSION_API_PREFIX); transport details are plain dataclass fields.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import ssl

import aiohttp

DEFAULT_API_URL = 'http://localhost:8080'
DEFAULT_API_PREFIX = '/api/v1'

API_URL_ENV = 'AUTHSESSION_API_URL'
API_PREFIX_ENV = 'AUTHSESSION_API_PREFIX'


@dataclass
class ProxyConfig:
    """HTTP(S) proxy used for every backend call."""
    url: str
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    
    def request_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``ClientSession.request``."""
        kwargs: Dict[str, Any] = {'proxy': self.url}
        if self.username:
            kwargs['proxy_auth'] = aiohttp.BasicAuth(self.username, self.password or '')
        return kwargs


@dataclass
class SSLConfig:
    """TLS settings for HTTPS backends."""
    verify: bool = True
    ca_file: Optional[str] = None
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    
    def create_ssl_context(self):
        """
        Build the ``ssl`` argument for the connector.
        
        Returns:
            False when verification is disabled, otherwise an SSLContext
        """
        if not self.verify:
            return False
        context = ssl.create_default_context(cafile=self.ca_file)
        if self.cert_file:
            context.load_cert_chain(self.cert_file, keyfile=self.key_file)
        return context


@dataclass
class TimeoutConfig:
    """Request timeouts in seconds."""
    total: float = 30.0
    connect: float = 10.0
    sock_read: float = 20.0
    
    def to_aiohttp_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
        )


@dataclass
class APIConfig:
    """
    Auth backend location and transport settings.
    
    Request paths such as ``/auth/login`` are joined onto
    ``api_url + api_prefix``.
    
    Example:
        >>> APIConfig().build_url('/auth/me')
        'http://localhost:8080/api/v1/auth/me'
    """
    api_url: str = DEFAULT_API_URL
    api_prefix: str = DEFAULT_API_PREFIX
    user_agent: str = 'authsession/1.0.0'
    
    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    extra_headers: Dict[str, str] = field(default_factory=dict)
    
    # Level applied to the transport logger when logging is unconfigured
    log_level: int = logging.INFO
    
    # Connection pool
    limit: int = 100
    limit_per_host: int = 10
    
    @property
    def base_url(self) -> str:
        """Backend URL that request paths are appended to."""
        prefix = self.api_prefix.strip('/')
        root = self.api_url.rstrip('/')
        return f"{root}/{prefix}" if prefix else root
    
    def build_url(self, path: str) -> str:
        """Join a request path such as ``/auth/me`` onto the base URL."""
        if path.startswith(('http://', 'https://')):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"
    
    @classmethod
    def default(cls) -> 'APIConfig':
        return cls()
    
    @classmethod
    def from_env(cls, **kwargs) -> 'APIConfig':
        """Read the backend location from AUTHSESSION_* environment variables."""
        kwargs.setdefault('api_url', os.environ.get(API_URL_ENV, DEFAULT_API_URL))
        kwargs.setdefault('api_prefix', os.environ.get(API_PREFIX_ENV, DEFAULT_API_PREFIX))
        return cls(**kwargs)
    
    @classmethod
    def with_proxy(
        cls,
        proxy_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        **kwargs
    ) -> 'APIConfig':
        """Configuration routing every call through a proxy."""
        return cls(proxy=ProxyConfig(proxy_url, username, password), **kwargs)
    
    @classmethod
    def insecure(cls, **kwargs) -> 'APIConfig':
        """Configuration with TLS verification disabled (local development only)."""
        return cls(ssl=SSLConfig(verify=False), **kwargs)
    
    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``aiohttp.TCPConnector``."""
        return {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
            'ssl': self.ssl.create_ssl_context(),
        }
    
    def get_session_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``aiohttp.ClientSession``."""
        headers = {'User-Agent': self.user_agent, 'Accept': 'application/json'}
        headers.update(self.extra_headers)
        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
