"""
Observable session state.

SessionState is the single in-memory source of truth for the current
user, tokens and loading/authenticated flags.

Only SessionManager and RefreshCoordinator may call the mutation methods
(install, set_tokens, set_user, set_loading, reset). This confinement is
a convention of the package and is not enforced by the language; every
other component reads snapshots and subscribes to changes.
"""
from dataclasses import replace
from typing import Callable, Optional

from .models import SessionSnapshot, UserProfile
from ..events import EventEmitter
from ..exceptions import SessionStateError
from ..logging import get_logger
from ..tokens import TokenPair

CHANGE_EVENT = 'change'

Subscriber = Callable[[SessionSnapshot], None]


class SessionState:
    """
    Holds the current SessionSnapshot and notifies subscribers.
    
    Subscribers are called synchronously with the new snapshot right after
    each mutation, in the order mutations were applied. A mutation that
    leaves the snapshot unchanged notifies nobody.
    
    Example:
        >>> state = SessionState()
        >>> unsubscribe = state.subscribe(lambda snap: print(snap.is_authenticated))
        >>> state.install(user, tokens)
    """
    
    def __init__(self):
        self._snapshot = SessionSnapshot()
        self._emitter = EventEmitter()
        self._logger = get_logger('state')
    
    @property
    def snapshot(self) -> SessionSnapshot:
        """Current snapshot."""
        return self._snapshot
    
    @property
    def user(self) -> Optional[UserProfile]:
        return self._snapshot.user
    
    @property
    def tokens(self) -> Optional[TokenPair]:
        return self._snapshot.tokens
    
    @property
    def is_authenticated(self) -> bool:
        return self._snapshot.is_authenticated
    
    @property
    def is_loading(self) -> bool:
        return self._snapshot.is_loading
    
    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register an observer.
        
        Args:
            callback: Called with the new SessionSnapshot after each mutation
            
        Returns:
            Callable that removes the observer
        """
        self._emitter.on(CHANGE_EVENT, callback)
        
        def unsubscribe() -> None:
            self._emitter.off(CHANGE_EVENT, callback)
        
        return unsubscribe
    
    # Mutations (SessionManager / RefreshCoordinator only)
    
    def install(self, user: UserProfile, tokens: TokenPair) -> None:
        """Install an authenticated session in one step."""
        self._apply(SessionSnapshot(
            user=user,
            tokens=tokens,
            is_authenticated=True,
            is_loading=False,
        ))
    
    def set_tokens(self, tokens: Optional[TokenPair]) -> None:
        """Replace the token pair, keeping user and flags."""
        self._apply(replace(self._snapshot, tokens=tokens))
    
    def set_user(self, user: Optional[UserProfile]) -> None:
        """Replace the user profile, keeping tokens and flags."""
        self._apply(replace(self._snapshot, user=user))
    
    def set_loading(self, is_loading: bool) -> None:
        self._apply(replace(self._snapshot, is_loading=is_loading))
    
    def update(self, **changes) -> None:
        """Apply several field changes as one mutation."""
        self._apply(replace(self._snapshot, **changes))
    
    def reset(self) -> None:
        """Return to the initial unauthenticated shape."""
        self._apply(SessionSnapshot())
    
    def _apply(self, snapshot: SessionSnapshot) -> None:
        problems = snapshot.violations()
        if problems:
            raise SessionStateError(f"Rejected session state: {'; '.join(problems)}")
        
        if snapshot == self._snapshot:
            return
        
        self._snapshot = snapshot
        self._logger.debug(
            f"Session state: authenticated={snapshot.is_authenticated} "
            f"loading={snapshot.is_loading} user={snapshot.user.username if snapshot.user else None}"
        )
        self._emitter.emit(CHANGE_EVENT, snapshot)
