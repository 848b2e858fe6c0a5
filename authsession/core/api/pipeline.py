"""
Request pipeline.

Every authenticated backend call goes through RequestPipeline.send():
it attaches the current bearer token and, on a 401, refreshes the token
through the RefreshCoordinator and retries the request exactly once.
"""
from typing import Callable, Optional

from .async_client import AsyncAPIClient
from .refresh import RefreshCoordinator
from .request import ApiRequest, ApiResponse
from ..exceptions import UnauthorizedAfterRetry
from ..logging import get_logger
from ..state import SessionState


class RequestPipeline:
    """
    Wraps the transport with token attachment and refresh-on-401.
    
    Retry policy: one retry at most. A request rejected with 401 after
    its retry ends the session with UnauthorizedAfterRetry, unless another
    session (a new login) was installed while the request was in flight.
    """
    
    def __init__(
        self,
        client: AsyncAPIClient,
        state: SessionState,
        coordinator: RefreshCoordinator,
        on_expired: Optional[Callable[[], None]] = None
    ):
        """
        Initialize the pipeline.
        
        Args:
            client: Transport used for every attempt
            state: Session state the current access token is read from
            coordinator: Single-flight refresh coordinator
            on_expired: Session teardown, called before UnauthorizedAfterRetry is raised
        """
        self._client = client
        self._state = state
        self._coordinator = coordinator
        self._on_expired = on_expired
        self._logger = get_logger('pipeline')
    
    async def send(
        self,
        request: ApiRequest,
        already_retried: bool = False,
        access_token: Optional[str] = None
    ) -> ApiResponse:
        """
        Send a request with token attachment and 401 recovery.
        
        Args:
            request: Request descriptor
            already_retried: True for the single retry attempt
            access_token: Token to use instead of the current one (set for the retry)
            
        Returns:
            The backend response; any non-401 status is returned unchanged
            
        Raises:
            SessionExpired: If the token could not be refreshed
            UnauthorizedAfterRetry: If the retry was rejected with 401 as well
            NetworkFailure: On transport errors
        """
        if not request.authenticated:
            return await self._client.send(request)
        
        token = access_token or self._state.snapshot.access_token
        response = await self._client.send(request, access_token=token)
        
        if not response.is_unauthorized:
            return response
        
        if already_retried:
            if token != self._state.snapshot.access_token:
                self._logger.info(f"{request!r} rejected again, but the session has changed since")
            else:
                self._logger.warning(f"{request!r} rejected again after refresh, ending session")
                if self._on_expired is not None:
                    self._on_expired()
            raise UnauthorizedAfterRetry(
                "Request unauthorized after token refresh",
                status=response.status
            )
        
        self._logger.info(f"{request!r} unauthorized, refreshing access token")
        new_token = await self._coordinator.refresh(stale_access_token=token)
        return await self.send(request, already_retried=True, access_token=new_token)
