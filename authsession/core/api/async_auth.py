"""
Async authentication service.

Wire calls for the backend's /auth endpoints.
"""
from typing import Optional
from dataclasses import dataclass, field

from .async_client import AsyncAPIClient
from .request import ApiRequest, ApiResponse, ResponseHandler
from ..exceptions import APIError
from ..logging import get_logger
from ..state import UserProfile
from ..tokens import TokenPair


@dataclass(frozen=True)
class LoginCredentials:
    """Email/password login input. Never persisted."""
    email: str
    password: str = field(repr=False)
    
    def to_payload(self) -> dict:
        return {'email': self.email, 'password': self.password}


@dataclass(frozen=True)
class RegisterCredentials:
    """Registration input. Never persisted."""
    username: str
    email: str
    password: str = field(repr=False)
    
    def to_payload(self) -> dict:
        return {'username': self.username, 'email': self.email, 'password': self.password}


@dataclass
class AuthResult:
    """Authentication result."""
    user: UserProfile
    tokens: TokenPair
    expires_in: Optional[int] = None


class AsyncAuthService:
    """
    Asynchronous authentication service.
    
    Handles login, registration, token refresh and logout calls.
    These requests never go through the refresh pipeline: a 401 from
    /auth/login means bad credentials, not an expired token.
    """
    
    LOGIN_PATH = '/auth/login'
    REGISTER_PATH = '/auth/register'
    REFRESH_PATH = '/auth/refresh'
    LOGOUT_PATH = '/auth/logout'
    ME_PATH = '/auth/me'
    
    def __init__(self, client: AsyncAPIClient):
        """
        Initialize auth service.
        
        Args:
            client: Async API client
        """
        self._client = client
        self._logger = get_logger('auth')
    
    async def login(self, credentials: LoginCredentials) -> AuthResult:
        """
        Log in with email and password.
        
        Args:
            credentials: Login credentials
            
        Returns:
            AuthResult with user profile and token pair
            
        Raises:
            InvalidCredentials: If the backend rejects the credentials
            NetworkFailure: On transport errors
            APIError: On other failures or a malformed response
        """
        response = await self._client.send(
            ApiRequest.post(self.LOGIN_PATH, credentials.to_payload(), authenticated=False)
        )
        ResponseHandler.raise_for_credentials(
            response, 'Login failed. Please check your credentials.'
        )
        return self._parse_auth_result(response)
    
    async def register(self, credentials: RegisterCredentials) -> AuthResult:
        """
        Create an account; the backend logs the new user in.
        
        Raises:
            InvalidCredentials: If the backend rejects the submitted data
            NetworkFailure: On transport errors
            APIError: On other failures or a malformed response
        """
        response = await self._client.send(
            ApiRequest.post(self.REGISTER_PATH, credentials.to_payload(), authenticated=False)
        )
        ResponseHandler.raise_for_credentials(
            response, 'Registration failed. Please try again.'
        )
        return self._parse_auth_result(response)
    
    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Exchange a refresh token for a new token pair.
        
        The backend may rotate the refresh token; if it does not, the
        submitted refresh token is kept.
        
        Raises:
            SessionExpired: If the refresh token is rejected with 401
            APIError: On other failures
            NetworkFailure: On transport errors
        """
        response = await self._client.send(
            ApiRequest.post(self.REFRESH_PATH, {'refresh_token': refresh_token}, authenticated=False)
        )
        ResponseHandler.raise_for_status(response, 'Token refresh failed')
        data = ResponseHandler.require_object(response, 'access_token')
        return TokenPair(
            access_token=data['access_token'],
            refresh_token=data.get('refresh_token') or refresh_token,
        )
    
    async def logout(self, tokens: TokenPair) -> None:
        """
        Revoke the refresh token on the backend.
        
        Raises:
            AuthSessionError: If the backend call fails
        """
        response = await self._client.send(
            ApiRequest.post(
                self.LOGOUT_PATH,
                {'refresh_token': tokens.refresh_token},
                authenticated=False,
            ),
            access_token=tokens.access_token,
        )
        ResponseHandler.raise_for_status(response, 'Logout failed')
    
    @staticmethod
    def current_user_request() -> ApiRequest:
        """Request descriptor for the authenticated /auth/me call."""
        return ApiRequest.get(AsyncAuthService.ME_PATH)
    
    @staticmethod
    def parse_user(response: ApiResponse) -> UserProfile:
        """
        Parse a /auth/me response.
        
        Raises:
            APIError: If the response is not a user object
        """
        data = ResponseHandler.require_object(response, 'id', 'username')
        return UserProfile.from_dict(data)
    
    def _parse_auth_result(self, response: ApiResponse) -> AuthResult:
        data = ResponseHandler.require_object(response, 'user', 'access_token', 'refresh_token')
        user_data = data['user']
        if not isinstance(user_data, dict) or 'id' not in user_data or 'username' not in user_data:
            raise APIError("Malformed response: invalid user", status=response.status)
        return AuthResult(
            user=UserProfile.from_dict(user_data),
            tokens=TokenPair(data['access_token'], data['refresh_token']),
            expires_in=data.get('expires_in'),
        )
