"""
High-level session manager.

SessionManager owns the token store, the observable session state, the
request pipeline and the refresh coordinator, and exposes the operations
callers use: bootstrap, login, register, logout, update_user,
fetch_current_user and the wrapped request primitive.
"""
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from .core.api import (
    APIConfig,
    ApiRequest,
    ApiResponse,
    AsyncAPIClient,
    AsyncAuthService,
    AuthResult,
    LoginCredentials,
    RefreshCoordinator,
    RegisterCredentials,
    RequestPipeline,
    ResponseHandler,
)
from .core.exceptions import (
    AuthSessionError,
    BootstrapError,
    SessionExpired,
)
from .core.logging import get_logger
from .core.state import SessionSnapshot, SessionState, UserProfile
from .core.tokens import MemoryTokenStore, SQLiteTokenStore, TokenStore


class SessionManager:
    """
    Client-side authentication session manager.

    Construct one per process. Logout resets it; it is never recreated
    mid-session.

    Token store selection:
        >>> SessionManager()                    # in-memory tokens
        >>> SessionManager("my_account")        # my_account.session SQLite file
        >>> SessionManager(custom_store)        # any TokenStore implementation

    Usage:
        >>> async with SessionManager("my_account", config=APIConfig.from_env()) as session:
        ...     await session.bootstrap()
        ...     if not session.snapshot.is_authenticated:
        ...         await session.login(LoginCredentials("a@b.com", "secret123"))
        ...     response = await session.request('GET', '/movies')
    """

    def __init__(
        self,
        store: Optional[Union[str, Path, TokenStore]] = None,
        *,
        config: Optional[APIConfig] = None,
        base_path: Optional[Path] = None,
        client: Optional[AsyncAPIClient] = None
    ):
        """
        Initialize the session manager.

        Args:
            store: Store name/path (SQLite file), a TokenStore, or None for memory
            config: API configuration (ignored when ``client`` is given)
            base_path: Base directory for SQLite store files
            client: Preconfigured transport, mainly for tests
        """
        self._logger = get_logger('session')

        if store is None:
            self._store: TokenStore = MemoryTokenStore()
        elif isinstance(store, (str, Path)):
            self._store = SQLiteTokenStore(store, base_path)
        else:
            self._store = store

        self._client = client or AsyncAPIClient(config)
        self._auth = AsyncAuthService(self._client)
        self._state = SessionState()
        self._coordinator = RefreshCoordinator(
            self._store,
            self._auth.refresh,
            on_refreshed=self._state.set_tokens,
            on_expired=self._teardown,
        )
        self._pipeline = RequestPipeline(
            self._client,
            self._state,
            self._coordinator,
            on_expired=self._teardown,
        )

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def state(self) -> SessionState:
        """Observable session state (read-only outside this class)."""
        return self._state

    @property
    def snapshot(self) -> SessionSnapshot:
        return self._state.snapshot

    @property
    def store(self) -> TokenStore:
        return self._store

    @property
    def coordinator(self) -> RefreshCoordinator:
        return self._coordinator

    @property
    def config(self) -> APIConfig:
        return self._client.config

    def subscribe(self, callback: Callable[[SessionSnapshot], None]) -> Callable[[], None]:
        """Subscribe to session changes; returns an unsubscribe callable."""
        return self._state.subscribe(callback)

    # =========================================================================
    # Context manager
    # =========================================================================

    async def __aenter__(self) -> 'SessionManager':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Release the HTTP session and the token store. Tokens stay stored."""
        await self._client.close()
        if hasattr(self._store, 'close'):
            self._store.close()

    # =========================================================================
    # Operations
    # =========================================================================

    async def bootstrap(self) -> SessionSnapshot:
        """
        Restore the stored session at process start.

        Only authorization failures end the stored session. Network and
        server errors keep the stored tokens so bootstrap can be retried.

        Returns:
            Resulting snapshot

        Raises:
            BootstrapError: If /auth/me failed for a non-authorization reason
        """
        pair = self._store.load()
        if pair is None:
            self._state.update(is_loading=False, is_authenticated=False)
            return self._state.snapshot

        self._state.update(tokens=pair, is_loading=True)
        try:
            user = await self._get_current_user()
        except SessionExpired:
            self._logger.info("Stored session is no longer valid, logging out")
            self._teardown()
        except AuthSessionError as e:
            self._logger.warning(f"Could not restore session: {e}")
            self._state.update(is_loading=False, is_authenticated=False)
            raise BootstrapError(f"Could not restore session: {e.message}", status=e.status) from e
        else:
            # A refresh during bootstrap may have rotated the pair
            self._state.install(user, self._state.tokens or pair)
            self._logger.info(f"Session restored for {user.username}")
        finally:
            # Also reached on cancellation and unexpected errors
            self._state.set_loading(False)
        return self._state.snapshot

    async def login(self, credentials: LoginCredentials) -> AuthResult:
        """
        Log in and install the new session.

        On failure any prior session is left untouched.

        Raises:
            InvalidCredentials: If the backend rejects the credentials
            NetworkFailure: On transport errors
            APIError: On other backend failures
        """
        result = await self._with_loading(self._auth.login(credentials))
        self._install(result)
        self._logger.info(f"Logged in as {result.user.username}")
        return result

    async def register(self, credentials: RegisterCredentials) -> AuthResult:
        """
        Register a new account and install its session.

        Raises:
            InvalidCredentials: If the backend rejects the submitted data
            NetworkFailure: On transport errors
            APIError: On other backend failures
        """
        result = await self._with_loading(self._auth.register(credentials))
        self._install(result)
        self._logger.info(f"Registered and logged in as {result.user.username}")
        return result

    async def logout(self) -> None:
        """
        End the session.

        The backend is informed on a best-effort basis; the local session
        is cleared regardless. Calling it while logged out does nothing.
        """
        tokens = self._state.tokens or self._store.load()
        if tokens is None:
            return

        self._coordinator.invalidate()
        self._state.set_loading(True)
        try:
            await self._auth.logout(tokens)
        except AuthSessionError as e:
            self._logger.warning(f"Backend logout failed, clearing local session anyway: {e}")
        finally:
            self._teardown()
        self._logger.info("Logged out")

    async def fetch_current_user(self) -> UserProfile:
        """
        Re-fetch the current user's profile.

        Fields the response omits keep their last known value.

        Raises:
            SessionExpired: If the session could not be recovered
            NetworkFailure: On transport errors
            APIError: On other backend failures
        """
        user = await self._with_loading(self._get_current_user())
        if self._state.tokens is not None:
            self._state.set_user(user)
        return user

    def update_user(self, **changes: Any) -> Optional[UserProfile]:
        """
        Merge profile fields locally, without touching tokens.

        Returns:
            Updated profile, or None when no user is installed

        Raises:
            ValueError: If a field name is unknown
        """
        user = self._state.user
        if user is None:
            return None
        updated = user.merge(**changes)
        self._state.set_user(updated)
        return updated

    async def send(self, request: ApiRequest) -> ApiResponse:
        """Send a request through the token-aware pipeline."""
        return await self._pipeline.send(request)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None
    ) -> ApiResponse:
        """
        Make an authenticated backend call.

        Application code uses this instead of raw HTTP so bearer
        attachment and refresh-on-401 apply uniformly.

        Args:
            method: HTTP method
            path: Path relative to the API base URL
            json: Optional JSON body
            params: Optional query parameters
            headers: Optional extra headers

        Returns:
            Backend response (any status other than an unrecoverable 401)
        """
        return await self.send(ApiRequest(
            method.upper(),
            path,
            json=json,
            params=params,
            headers=dict(headers or {}),
        ))

    # =========================================================================
    # Internal helpers
    # =========================================================================

    async def _get_current_user(self) -> UserProfile:
        response = await self._pipeline.send(AsyncAuthService.current_user_request())
        ResponseHandler.raise_for_status(response, 'Could not fetch current user')
        user = AsyncAuthService.parse_user(response)
        previous = self._state.user
        return user.fill_from(previous) if previous is not None else user

    async def _with_loading(self, operation):
        """Await an operation with is_loading set, then restore the previous flag."""
        previous = self._state.is_loading
        self._state.set_loading(True)
        try:
            return await operation
        finally:
            self._state.set_loading(previous)

    def _install(self, result: AuthResult) -> None:
        self._coordinator.invalidate()
        self._store.save(result.tokens)
        self._state.install(result.user, result.tokens)

    def _teardown(self) -> None:
        """Clear stored tokens and reset the state to unauthenticated."""
        self._store.clear()
        self._state.reset()
