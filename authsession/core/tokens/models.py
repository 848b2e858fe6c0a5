"""
Token data models.

Contains the token pair persisted between runs.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class TokenPair:
    """
    Access/refresh token pair for an authenticated session.
    
    Both tokens are always present together. A session never holds
    one without the other.
    
    Attributes:
        access_token: Short-lived bearer credential
        refresh_token: Longer-lived credential exchanged for new access tokens
    """
    access_token: str
    refresh_token: str
    
    def __post_init__(self):
        if not self.access_token or not self.refresh_token:
            raise ValueError("TokenPair requires both access_token and refresh_token")
    
    def __repr__(self) -> str:
        return "TokenPair(access_token='***', refresh_token='***')"
    
    def with_access_token(self, access_token: str) -> 'TokenPair':
        """Return a copy carrying a new access token."""
        return TokenPair(access_token=access_token, refresh_token=self.refresh_token)
    
    def to_dict(self) -> Dict[str, str]:
        """
        Convert to the backend's JSON field names.
        
        Returns:
            Dictionary representation
        """
        return {
            'access_token': self.access_token,
            'refresh_token': self.refresh_token,
        }
    
    @classmethod
    def from_values(
        cls,
        access_token: Optional[str],
        refresh_token: Optional[str]
    ) -> Optional['TokenPair']:
        """
        Build a pair from two possibly-missing values.
        
        Absence of either value is treated as absence of both.
        
        Returns:
            TokenPair, or None if either value is empty
        """
        if not access_token or not refresh_token:
            return None
        return cls(access_token=access_token, refresh_token=refresh_token)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional['TokenPair']:
        """Create from a dictionary with backend field names."""
        return cls.from_values(data.get('access_token'), data.get('refresh_token'))
