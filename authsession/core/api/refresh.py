"""
Single-flight token refresh.

When several requests fail with 401 at nearly the same time, only one
refresh call reaches the backend; every caller waits for that call and
shares its result. A refresh token is presented at most once per cycle.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from ..exceptions import AuthSessionError, SessionExpired
from ..logging import get_logger
from ..tokens import TokenPair, TokenStore

RefreshCall = Callable[[str], Awaitable[TokenPair]]


@dataclass
class _RefreshCycle:
    """One in-flight refresh call and the callers waiting on it."""
    generation: int
    refresh_token: Optional[str]
    waiters: List[asyncio.Future] = field(default_factory=list)
    task: Optional[asyncio.Task] = None


class RefreshCoordinator:
    """
    Deduplicates concurrent refresh attempts.
    
    States:
        idle        no cycle; ``refresh()`` opens one and starts exactly
                    one backend call with the refresh token read from the
                    store at that moment
        refreshing  a cycle is open; ``refresh()`` only enqueues a waiter
    
    On success the new pair is saved, published through ``on_refreshed``,
    the coordinator returns to idle and waiters are resolved in FIFO order
    with the new access token. On any failure the coordinator returns to
    idle, ``on_expired`` tears the session down and every waiter is
    rejected with SessionExpired. Failures are never retried. A pair that
    cannot be saved counts as a failure; an exception from a callback is
    logged and the cycle still settles every waiter.
    
    Each cycle carries a generation number. ``invalidate()`` supersedes the
    open cycle; a superseded cycle never touches the store or the state
    when it completes.
    
    Example:
        >>> coordinator = RefreshCoordinator(store, auth.refresh,
        ...                                  on_refreshed=state.set_tokens,
        ...                                  on_expired=teardown)
        >>> access_token = await coordinator.refresh()
    """
    
    def __init__(
        self,
        store: TokenStore,
        refresh_call: RefreshCall,
        on_refreshed: Optional[Callable[[TokenPair], None]] = None,
        on_expired: Optional[Callable[[], None]] = None
    ):
        """
        Initialize the coordinator.
        
        Args:
            store: Token store holding the current refresh token
            refresh_call: Coroutine function exchanging a refresh token for a new pair
            on_refreshed: Called with the new pair after it has been saved
            on_expired: Called once when a refresh cycle fails
        """
        self._store = store
        self._refresh_call = refresh_call
        self._on_refreshed = on_refreshed
        self._on_expired = on_expired
        self._cycle: Optional[_RefreshCycle] = None
        self._generation = 0
        self._refresh_count = 0
        self._logger = get_logger('refresh')
    
    @property
    def is_refreshing(self) -> bool:
        return self._cycle is not None
    
    @property
    def generation(self) -> int:
        return self._generation
    
    @property
    def refresh_count(self) -> int:
        """Number of backend refresh calls started so far."""
        return self._refresh_count
    
    async def refresh(self, stale_access_token: Optional[str] = None) -> str:
        """
        Get a fresh access token, sharing any refresh already in flight.
        
        Args:
            stale_access_token: The access token that was just rejected. If
                the store already holds a different one (another cycle
                finished in the meantime), it is returned without a call.
        
        Returns:
            New access token
            
        Raises:
            SessionExpired: If the refresh failed; the session is gone
        """
        if self._cycle is None and stale_access_token is not None:
            current = self._store.load()
            if current is not None and current.access_token != stale_access_token:
                self._logger.debug("Access token already rotated, skipping refresh")
                return current.access_token
        
        waiter = asyncio.get_running_loop().create_future()
        
        if self._cycle is None:
            self._start_cycle().waiters.append(waiter)
        else:
            self._logger.debug(
                f"Refresh in flight (generation {self._cycle.generation}), queueing waiter"
            )
            self._cycle.waiters.append(waiter)
        
        return await waiter
    
    def invalidate(self) -> None:
        """Supersede the open cycle, if any; its completion is discarded."""
        self._generation += 1
        if self._cycle is not None:
            self._logger.debug(f"Superseding refresh generation {self._cycle.generation}")
        self._cycle = None
    
    async def wait_idle(self) -> None:
        """Wait until the open cycle, if any, has finished."""
        cycle = self._cycle
        if cycle is not None and cycle.task is not None:
            await asyncio.shield(cycle.task)
    
    def _start_cycle(self) -> _RefreshCycle:
        self._generation += 1
        pair = self._store.load()
        cycle = _RefreshCycle(
            generation=self._generation,
            refresh_token=pair.refresh_token if pair else None,
        )
        self._cycle = cycle
        self._refresh_count += 1
        self._logger.info(f"Starting token refresh (generation {cycle.generation})")
        cycle.task = asyncio.create_task(self._run(cycle))
        return cycle
    
    async def _run(self, cycle: _RefreshCycle) -> None:
        try:
            if not cycle.refresh_token:
                raise SessionExpired("No refresh token available")
            pair = await self._refresh_call(cycle.refresh_token)
        except asyncio.CancelledError:
            self._finish_failed(cycle, SessionExpired("Token refresh was cancelled"))
            raise
        except AuthSessionError as e:
            self._logger.warning(f"Token refresh failed: {e}")
            error = SessionExpired(f"Session expired: {e.message}", status=e.status)
            error.__cause__ = e
            self._finish_failed(cycle, error)
        except Exception as e:
            self._logger.exception("Unexpected error during token refresh")
            error = SessionExpired(f"Session expired: {e}")
            error.__cause__ = e
            self._finish_failed(cycle, error)
        else:
            self._finish_succeeded(cycle, pair)
    
    def _is_current(self, cycle: _RefreshCycle) -> bool:
        return self._cycle is cycle and cycle.generation == self._generation
    
    def _finish_succeeded(self, cycle: _RefreshCycle, pair: TokenPair) -> None:
        if not self._is_current(cycle):
            self._logger.info(f"Discarding result of superseded refresh generation {cycle.generation}")
            self._reject(cycle, SessionExpired("Session changed while refreshing"))
            return
        
        self._cycle = None
        try:
            self._store.save(pair)
        except Exception as e:
            self._logger.exception("Could not store refreshed tokens")
            error = SessionExpired(f"Session expired: could not store refreshed tokens: {e}")
            error.__cause__ = e
            self._expire(cycle, error)
            return
        
        try:
            if self._on_refreshed is not None:
                self._on_refreshed(pair)
        except Exception:
            self._logger.exception("Session update after token refresh failed")
        finally:
            self._logger.info(f"Token refresh succeeded (generation {cycle.generation})")
            for waiter in cycle.waiters:
                if not waiter.done():
                    waiter.set_result(pair.access_token)
    
    def _finish_failed(self, cycle: _RefreshCycle, error: SessionExpired) -> None:
        if self._is_current(cycle):
            self._cycle = None
            self._expire(cycle, error)
        else:
            self._logger.info(f"Ignoring failure of superseded refresh generation {cycle.generation}")
            self._reject(cycle, error)
    
    def _expire(self, cycle: _RefreshCycle, error: SessionExpired) -> None:
        """Tear the session down, then reject every waiter of the cycle."""
        try:
            if self._on_expired is not None:
                self._on_expired()
        except Exception:
            self._logger.exception("Session teardown after failed refresh raised")
        finally:
            self._reject(cycle, error)
    
    @staticmethod
    def _reject(cycle: _RefreshCycle, error: SessionExpired) -> None:
        for waiter in cycle.waiters:
            if not waiter.done():
                waiter.set_exception(error)
