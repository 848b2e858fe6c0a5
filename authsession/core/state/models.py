"""
Session state models.

Contains the user profile and the immutable session snapshot.
"""
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from ..tokens import TokenPair


@dataclass(frozen=True)
class UserProfile:
    """
    Server-authoritative user profile.
    
    Attributes:
        id: User ID
        username: Display name
        email: Email address (may be empty when the backend omits it)
        role: Account role, e.g. ``user`` or ``admin``; None when the backend omits it
        avatar_url: Optional avatar URL
    """
    id: Any
    username: str
    email: str = ''
    role: Optional[str] = None
    avatar_url: Optional[str] = None
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserProfile':
        """
        Create from the backend JSON representation.
        
        Args:
            data: Dictionary with user fields
            
        Returns:
            UserProfile instance
            
        Raises:
            KeyError: If ``id`` or ``username`` is missing
        """
        return cls(
            id=data['id'],
            username=data['username'],
            email=data.get('email') or '',
            role=data.get('role'),
            avatar_url=data.get('avatar_url'),
        )
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with backend field names."""
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'role': self.role,
            'avatar_url': self.avatar_url,
        }
    
    def merge(self, **changes: Any) -> 'UserProfile':
        """
        Return a copy with the given fields replaced.
        
        Raises:
            ValueError: If a field name is unknown
        """
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        return replace(self, **changes)
    
    def fill_from(self, previous: 'UserProfile') -> 'UserProfile':
        """
        Return a copy where fields this profile lacks are taken from ``previous``.
        
        /auth/me may return a subset of the profile; fields it omits keep
        their last known value. Profiles of different users are not mixed.
        """
        if previous.id != self.id:
            return self
        missing = {
            f.name: getattr(previous, f.name)
            for f in fields(self)
            if getattr(self, f.name) in (None, '')
        }
        return replace(self, **missing)


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Point-in-time view of the session.
    
    Invariants:
        is_authenticated implies tokens is not None
        user is not None implies tokens is not None
    """
    user: Optional[UserProfile] = None
    tokens: Optional[TokenPair] = None
    is_authenticated: bool = False
    is_loading: bool = False
    
    def violations(self) -> list:
        """List the invariants this snapshot breaks (empty when consistent)."""
        problems = []
        if self.is_authenticated and self.tokens is None:
            problems.append("authenticated session without tokens")
        if self.user is not None and self.tokens is None:
            problems.append("user profile without tokens")
        return problems
    
    @property
    def access_token(self) -> Optional[str]:
        return self.tokens.access_token if self.tokens else None
