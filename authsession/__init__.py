"""
authsession - Async client-side authentication session manager.

Owns the access/refresh token pair, persists it, attaches it to every
request and transparently refreshes it when the backend answers 401.

Usage:
    >>> from authsession import SessionManager, LoginCredentials
    >>> 
    >>> async with SessionManager("my_account") as session:
    ...     await session.bootstrap()
    ...     if not session.snapshot.is_authenticated:
    ...         await session.login(LoginCredentials("a@b.com", "secret123"))
    ...     response = await session.request("GET", "/auth/me")
"""
import logging
from .client import SessionManager

# Configuration and transport
from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    ApiRequest,
    ApiResponse,
    AsyncAPIClient,
    AsyncAuthService,
    AuthResult,
    LoginCredentials,
    RegisterCredentials,
    RefreshCoordinator,
    RequestPipeline
)

# Token storage
from .core.tokens import (
    TokenStore,
    TokenPair,
    SQLiteTokenStore,
    MemoryTokenStore
)

# Session state
from .core.state import (
    SessionState,
    SessionSnapshot,
    UserProfile
)

# Errors
from .core.exceptions import (
    AuthSessionError,
    InvalidCredentials,
    NetworkFailure,
    APIError,
    SessionExpired,
    UnauthorizedAfterRetry,
    BootstrapError,
    SessionStateError
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for authsession modules.
    
    This ensures that all authsession loggers are properly configured
    to show log messages at the specified level.
    
    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'authsession',
        'authsession.api',
        'authsession.auth',
        'authsession.pipeline',
        'authsession.refresh',
        'authsession.session',
        'authsession.state',
    ]
    
    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        # Ensure propagation is enabled
        logger.propagate = True


__all__ = [
    'SessionManager',
    'LoginCredentials',
    'RegisterCredentials',
    'AuthResult',
    'SessionState',
    'SessionSnapshot',
    'UserProfile',
    'TokenStore',
    'TokenPair',
    'SQLiteTokenStore',
    'MemoryTokenStore',
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'ApiRequest',
    'ApiResponse',
    'AsyncAPIClient',
    'AsyncAuthService',
    'RefreshCoordinator',
    'RequestPipeline',
    'AuthSessionError',
    'InvalidCredentials',
    'NetworkFailure',
    'APIError',
    'SessionExpired',
    'UnauthorizedAfterRetry',
    'BootstrapError',
    'SessionStateError',
    'setup_logging',
]
