"""
In-memory token storage implementation.

Provides non-persistent token storage for testing and temporary use.
"""
from typing import Optional

from .protocols import TokenStore
from .models import TokenPair


class MemoryTokenStore(TokenStore):
    """
    In-memory token storage.
    
    Stores the token pair in memory only.
    Data is lost when the object is destroyed.
    
    Useful for:
    - Unit testing
    - Short-lived scripts
    - CI/CD environments
    
    Example:
        >>> store = MemoryTokenStore()
        >>> store.save(TokenPair("access", "refresh"))
        >>> store.load().access_token
        'access'
    """
    
    def __init__(self, pair: Optional[TokenPair] = None):
        """
        Initialize memory token storage.
        
        Args:
            pair: Optional initial token pair
        """
        self._pair: Optional[TokenPair] = pair
    
    def load(self) -> Optional[TokenPair]:
        return self._pair
    
    def save(self, pair: TokenPair) -> None:
        self._pair = pair
    
    def clear(self) -> None:
        self._pair = None
    
    def exists(self) -> bool:
        return self._pair is not None
    
    def close(self) -> None:
        """Close storage (no-op for memory storage)."""
        pass
    
    def __enter__(self) -> 'MemoryTokenStore':
        """Context manager entry."""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
