"""
Session state module.

Provides the observable in-memory view of the current session.
"""
from .models import UserProfile, SessionSnapshot
from .session_state import SessionState

__all__ = [
    'UserProfile',
    'SessionSnapshot',
    'SessionState',
]
