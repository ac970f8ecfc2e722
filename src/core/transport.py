"""
HTTP access to the inference backend.
"""

import logging
from typing import AsyncIterator, Optional

import httpx

from core.dispatcher import OutboundRequest
from core.errors import TransportError

logger = logging.getLogger(__name__)


class HttpTransport:
    """
    Posts outbound requests and yields the raw response body.

    Reads never time out on their own; a caller that wants a deadline
    cancels the consuming task, which closes the response.
    """

    def __init__(
        self,
        base_url: str,
        connect_timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self._client = client
        self._owns_client = client is None
        self._timeout = httpx.Timeout(None, connect=connect_timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def open(self, request: OutboundRequest) -> AsyncIterator[bytes]:
        """
        Send `request` and yield body chunks as they arrive.

        Raises:
            TransportError: connection failure, a non-2xx status, or the
                body breaking off or being closed mid-read.
        """
        logger.debug('POST %s (%s)', request.endpoint, request.mode.value)
        try:
            url = f'{self.base_url}{request.endpoint}'
            async with self.client.stream('POST', url, **request.to_httpx()) as response:
                if response.is_error:
                    detail = (await response.aread()).decode('utf-8', errors='replace')
                    raise TransportError(
                        f'Server responded with status {response.status_code}: {detail or response.reason_phrase}'
                    )
                async for chunk in response.aiter_bytes():
                    yield chunk
        except (httpx.HTTPError, httpx.StreamError) as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
