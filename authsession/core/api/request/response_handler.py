"""Response handler mapping backend responses to results or exceptions."""
import json
from typing import Any, Dict

from .models import ApiResponse
from ...exceptions import APIError, InvalidCredentials, SessionExpired

# Statuses that mean "the submitted credentials/form were rejected"
CREDENTIAL_STATUSES = (400, 401, 403, 409, 422)


class ResponseHandler:
    """Handles backend responses."""
    
    @staticmethod
    def parse_body(text: str, content_type: str = '') -> Any:
        """Parses a response body; JSON when possible, raw text otherwise."""
        if not text:
            return None
        if 'json' in content_type or text[:1] in ('{', '['):
            try:
                return json.loads(text)
            except ValueError:
                return text
        return text
    
    @staticmethod
    def error_message(response: ApiResponse, default: str) -> str:
        """Extracts the backend's ``error`` message."""
        data = response.data
        if isinstance(data, dict):
            message = data.get('error') or data.get('message')
            if message:
                return str(message)
        if isinstance(data, str) and data.strip():
            return data.strip()
        return default
    
    @staticmethod
    def field_errors(response: ApiResponse) -> Dict[str, str]:
        """Extracts per-field messages from an ``errors`` object."""
        data = response.data
        if isinstance(data, dict) and isinstance(data.get('errors'), dict):
            return {str(k): str(v) for k, v in data['errors'].items()}
        return {}
    
    @classmethod
    def raise_for_credentials(cls, response: ApiResponse, default: str) -> None:
        """
        Raises for a failed login/register response.
        
        Raises:
            InvalidCredentials: The backend rejected the submitted data
            APIError: Any other failure status
        """
        if response.ok:
            return
        message = cls.error_message(response, default)
        if response.status in CREDENTIAL_STATUSES:
            raise InvalidCredentials(
                message,
                status=response.status,
                field_errors=cls.field_errors(response)
            )
        raise APIError(message, status=response.status)
    
    @classmethod
    def raise_for_status(cls, response: ApiResponse, default: str = 'Request failed') -> None:
        """
        Raises for any non-success response.
        
        Raises:
            SessionExpired: On 401
            APIError: On any other failure status
        """
        if response.ok:
            return
        message = cls.error_message(response, default)
        if response.is_unauthorized:
            raise SessionExpired(message, status=response.status)
        raise APIError(message, status=response.status)
    
    @staticmethod
    def require_object(response: ApiResponse, *keys: str) -> Dict[str, Any]:
        """
        Returns the JSON object body, checking required keys.
        
        Raises:
            APIError: If the body is not an object or a key is missing
        """
        data = response.data
        if not isinstance(data, dict):
            raise APIError("Malformed response: expected a JSON object", status=response.status)
        missing = [key for key in keys if data.get(key) in (None, '')]
        if missing:
            raise APIError(
                f"Malformed response: missing {', '.join(missing)}",
                status=response.status
            )
        return data
