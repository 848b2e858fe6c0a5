"""
Token storage module.

Provides persistent storage for the access/refresh token pair.
"""
from .protocols import TokenStore
from .models import TokenPair
from .sqlite_store import SQLiteTokenStore
from .memory_store import MemoryTokenStore

__all__ = [
    'TokenStore',
    'TokenPair',
    'SQLiteTokenStore',
    'MemoryTokenStore',
]
