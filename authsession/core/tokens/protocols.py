"""
Token storage protocols.

Defines the interface for token store implementations.
"""
from typing import Protocol, Optional, runtime_checkable
from .models import TokenPair


@runtime_checkable
class TokenStore(Protocol):
    """
    Protocol for durable token storage.
    
    Implementations can use SQLite, a keyring, Redis, or any other backend.
    Calls are synchronous so a store can be used before any event loop
    exists. Both tokens are written together or not at all.
    """
    
    def load(self) -> Optional[TokenPair]:
        """
        Load the stored token pair.
        
        Returns:
            TokenPair if one is stored, None otherwise
        """
        ...
    
    def save(self, pair: TokenPair) -> None:
        """
        Replace the stored token pair.
        
        Args:
            pair: Token pair to save
        """
        ...
    
    def clear(self) -> None:
        """
        Remove the stored token pair.
        """
        ...
    
    def exists(self) -> bool:
        """
        Check if a token pair is stored.
        
        Returns:
            True if a pair is stored
        """
        ...
    
    def close(self) -> None:
        """
        Close storage and release resources.
        """
        ...
