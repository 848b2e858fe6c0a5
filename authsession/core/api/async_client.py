"""
Async auth backend client.

Thin aiohttp transport: sends ApiRequest descriptors and returns
ApiResponse objects without interpreting status codes.
"""
import asyncio
import logging
from typing import Optional

import aiohttp

from .config import APIConfig
from .request import ApiRequest, ApiResponse, RequestBuilder, ResponseHandler
from ..exceptions import NetworkFailure
from ..logging import get_logger


class AsyncAPIClient:
    """
    aiohttp transport for the auth backend.
    
    One pooled ClientSession is opened on first use and reused until
    close(). Every HTTP status, 401 included, comes back as an
    ApiResponse; only connection failures and timeouts raise
    (as NetworkFailure).
    
    Example:
        >>> async with AsyncAPIClient(APIConfig.from_env()) as client:
        ...     response = await client.send(ApiRequest.get('/auth/me'), access_token)
        ...     response.status
        200
    """
    
    def __init__(self, config: Optional[APIConfig] = None):
        """
        Args:
            config: Backend configuration; APIConfig.default() when omitted
        """
        self._config = config or APIConfig.default()
        self._builder = RequestBuilder(self._config)
        self._http: Optional[aiohttp.ClientSession] = None
        self._closed = False
        
        self._logger = get_logger('api')
        # Only set level if root logger has no handlers (basicConfig not called)
        if not logging.getLogger().handlers:
            self._logger.setLevel(self._config.log_level)
    
    @property
    def config(self) -> APIConfig:
        return self._config
    
    @property
    def closed(self) -> bool:
        return self._closed
    
    async def __aenter__(self) -> 'AsyncAPIClient':
        await self._http_session()
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
    
    async def _http_session(self) -> aiohttp.ClientSession:
        """Open the pooled HTTP session on first use. A closed client never reopens."""
        if self._http is None or self._http.closed:
            connector = aiohttp.TCPConnector(**self._config.get_connector_kwargs())
            self._http = aiohttp.ClientSession(
                connector=connector,
                **self._config.get_session_kwargs()
            )
        return self._http
    
    async def close(self):
        """Close the HTTP session; later send() calls raise NetworkFailure."""
        self._closed = True
        http, self._http = self._http, None
        if http is not None and not http.closed:
            # The session owns its connector and closes it too
            await http.close()
    
    async def send(
        self,
        request: ApiRequest,
        access_token: Optional[str] = None
    ) -> ApiResponse:
        """
        Send one request to the backend.
        
        Args:
            request: Request descriptor
            access_token: Bearer token to attach, if any
            
        Returns:
            ApiResponse with decoded body
            
        Raises:
            NetworkFailure: On connection errors and timeouts, or if closed
        """
        if self._closed:
            raise NetworkFailure("Client is closed")
        
        session = await self._http_session()
        url = self._builder.build_url(request)
        kwargs = self._builder.build_kwargs(request, access_token)
        
        self._logger.debug(f"{request.method} {url} (bearer={'yes' if access_token else 'no'})")
        
        try:
            async with session.request(request.method, url, **kwargs) as response:
                text = await response.text()
                self._logger.debug(f"{request.method} {url} -> {response.status}")
                return ApiResponse(
                    status=response.status,
                    data=ResponseHandler.parse_body(text, response.content_type or ''),
                    headers=dict(response.headers),
                )
        except aiohttp.ClientError as e:
            self._logger.error(f"Network error on {request.method} {request.path}: {e}")
            raise NetworkFailure(f"Network error: {e}") from e
        except asyncio.TimeoutError as e:
            self._logger.error(f"Timeout on {request.method} {request.path}")
            raise NetworkFailure("Request timed out") from e
