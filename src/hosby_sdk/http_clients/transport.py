"""
Transports for the Hosby request dispatcher

The dispatcher only depends on the fetch-style ``Transport`` protocol. Two
adapters are provided: ``HttpxTransport`` (async, the default) and
``RequestsTransport`` (a ``requests`` session with urllib3 retries, run in a
worker thread). Timeouts and retries are enforced here, never in the
dispatcher.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

import httpx
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..version import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"Hosby-Python-SDK/{__version__}"


@runtime_checkable
class TransportResponse(Protocol):
    """Response surface consumed by the dispatcher"""

    @property
    def ok(self) -> bool: ...

    @property
    def status(self) -> int: ...

    @property
    def status_text(self) -> str: ...

    @property
    def headers(self) -> Mapping[str, str]: ...

    async def json(self) -> Any: ...


@runtime_checkable
class Transport(Protocol):
    """Fetch-compatible transport"""

    async def __call__(
        self,
        url: str,
        *,
        method: str,
        headers: Dict[str, str],
        body: Optional[str] = None,
    ) -> TransportResponse: ...


class HttpxResponse:
    """Adapts ``httpx.Response`` to ``TransportResponse``"""

    def __init__(self, response: httpx.Response):
        self._response = response

    @property
    def ok(self) -> bool:
        return self._response.is_success

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def status_text(self) -> str:
        return self._response.reason_phrase

    @property
    def headers(self) -> Mapping[str, str]:
        return self._response.headers

    async def json(self) -> Any:
        return self._response.json()


class HttpxTransport:
    """
    Async transport backed by ``httpx.AsyncClient``

    Args:
        timeout: Request timeout in seconds, None for no timeout
        retries: Connection retries performed by the httpx transport
        client: Optional preconfigured client; closing is left to its owner
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        retries: int = 0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={'User-Agent': USER_AGENT},
            transport=httpx.AsyncHTTPTransport(retries=retries),
        )

    async def __call__(
        self,
        url: str,
        *,
        method: str,
        headers: Dict[str, str],
        body: Optional[str] = None,
    ) -> HttpxResponse:
        logger.debug(f"Making {method} request to {url}")
        response = await self.client.request(method, url, headers=headers, content=body)
        return HttpxResponse(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
            logger.debug("httpx client closed")


class RequestsResponse:
    """Adapts ``requests.Response`` to ``TransportResponse``"""

    def __init__(self, response: requests.Response):
        self._response = response

    @property
    def ok(self) -> bool:
        return self._response.ok

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def status_text(self) -> str:
        return self._response.reason or ''

    @property
    def headers(self) -> Mapping[str, str]:
        return self._response.headers

    async def json(self) -> Any:
        return json.loads(self._response.text)


class RequestsTransport:
    """
    Transport backed by a ``requests`` session

    Retries of idempotent failures (429/5xx) are handled by urllib3 ``Retry``
    mounted on the session; the blocking call runs via ``asyncio.to_thread``.

    Args:
        timeout: Request timeout in seconds
        retry_attempts: Total retries per request
        retry_backoff_factor: Backoff factor between retries
        verify_ssl: Whether to verify TLS certificates
    """

    def __init__(
        self,
        timeout: Optional[float] = 30.0,
        retry_attempts: int = 0,
        retry_backoff_factor: float = 0.3,
        verify_ssl: bool = True,
    ):
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.session = self._create_session(retry_attempts, retry_backoff_factor)

    def _create_session(self, retry_attempts: int, backoff_factor: float) -> requests.Session:
        """Create HTTP session with retry logic"""
        session = requests.Session()

        retry_strategy = Retry(
            total=retry_attempts,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "PUT", "DELETE", "OPTIONS", "TRACE"],
            backoff_factor=backoff_factor,
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({'User-Agent': USER_AGENT})

        return session

    def _send(self, url: str, method: str, headers: Dict[str, str], body: Optional[str]) -> requests.Response:
        logger.debug(f"Making {method} request to {url}")
        return self.session.request(
            method,
            url,
            headers=headers,
            data=body.encode('utf-8') if body is not None else None,
            timeout=self.timeout,
            verify=self.verify_ssl,
        )

    async def __call__(
        self,
        url: str,
        *,
        method: str,
        headers: Dict[str, str],
        body: Optional[str] = None,
    ) -> RequestsResponse:
        response = await asyncio.to_thread(self._send, url, method, headers, body)
        return RequestsResponse(response)

    async def aclose(self) -> None:
        self.session.close()
        logger.debug("HTTP session closed")
