"""
Hosby API client

``HosbyClient`` wires the request pipeline together from a ``ClientConfig``:
HTTPS policy check, RSA signer, CSRF token manager, header builder, transport
and dispatcher. Collaborators can be injected to replace any of them.
"""

import logging
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from .auth import AuthClient
from .config import ClientConfig
from .cookies import CookieStore
from .crud import CrudClient
from .csrf import CsrfTokenManager
from .exceptions import ConfigError
from .http_clients.dispatcher import FilterLike, OptionsLike, RequestDispatcher
from .http_clients.headers import HeaderBuilder
from .http_clients.transport import HttpxTransport, Transport
from .signing import RequestSigner, Signer
from .types import ApiResponse, SignedRequest

logger = logging.getLogger(__name__)


class HosbyClient:
    """
    Authenticated client for the Hosby API

    Every request is signed, carries the CSRF token once one is available, and
    replays the bearer token captured from previous responses. Errors are
    raised as ``HosbyError`` subclasses whose ``to_dict()`` is the normalized
    ``{"success": False, "status", "message"}`` shape.

    Args:
        config: Client configuration, or a mapping accepted by ``ClientConfig.from_dict``
        transport: Fetch-compatible transport (defaults to ``HttpxTransport``)
        signer: Request signer (defaults to ``RequestSigner``)
        cookie_store: Cookie capability used to share the CSRF token
        timestamp_generator: Returns the signing timestamp in epoch milliseconds

    Raises:
        ConfigError: If the configuration is missing, invalid, or violates the HTTPS policy
    """

    def __init__(
        self,
        config: Union[ClientConfig, Mapping[str, Any]],
        *,
        transport: Optional[Transport] = None,
        signer: Optional[Signer] = None,
        cookie_store: Optional[CookieStore] = None,
        timestamp_generator: Optional[Callable[[], int]] = None,
    ):
        if not config:
            raise ConfigError("Configuration is required")
        if not isinstance(config, ClientConfig):
            config = ClientConfig.from_dict(config)

        config.https_policy().validate(config.base_url)

        self.config = config
        self.identity = config.identity()
        self.profile = config.profile

        self._owns_transport = transport is None
        self.transport = transport or HttpxTransport(
            timeout=config.timeout,
            retries=config.retry_attempts,
        )
        self.signer = signer or RequestSigner()

        self.csrf = CsrfTokenManager(
            cookie_store=cookie_store,
            cookie_name=config.csrf_cookie_name,
            rotation_enabled=not config.use_same_token,
        )
        self.headers = HeaderBuilder(
            self.identity,
            self.signer,
            profile=self.profile,
            timestamp_generator=timestamp_generator,
        )
        self.dispatcher = RequestDispatcher(
            base_url=config.base_url,
            identity=self.identity,
            header_builder=self.headers,
            csrf=self.csrf,
            transport=self.transport,
            profile=self.profile,
        )
        self._crud: Optional[CrudClient] = None
        self._auth: Optional[AuthClient] = None

        logger.info(f"Hosby client initialized for: {config.base_url} (project: {self.identity.project_name})")

    @property
    def csrf_token(self) -> Optional[str]:
        return self.csrf.token

    @property
    def bearer_token(self) -> Optional[str]:
        return self.dispatcher.bearer_token

    @property
    def last_request(self) -> Optional[SignedRequest]:
        return self.dispatcher.last_request

    @property
    def crud(self) -> CrudClient:
        """Table-level CRUD operations bound to this client"""
        if self._crud is None:
            self._crud = CrudClient(self)
        return self._crud

    @property
    def auth(self) -> AuthClient:
        """Authenticator login/logout bound to this client"""
        if self._auth is None:
            self._auth = AuthClient(self)
        return self._auth

    async def init(self) -> None:
        """
        Fetch (or adopt from the cookie store) the CSRF token.

        Raises:
            TokenError: If the token cannot be fetched
        """
        if self.csrf.cookie_enabled:
            self.csrf.sync()
        await self.csrf.init(self.dispatcher.fetch_csrf_token)

    async def request(
        self,
        method: str,
        path: str,
        filters: Optional[Sequence[FilterLike]] = None,
        options: Optional[OptionsLike] = None,
        body: Any = None,
    ) -> ApiResponse:
        """
        Make an authenticated request.

        Args:
            method: HTTP method
            path: Path relative to the project
            filters: Query filters, repeated per field in the query string
            options: Query options (populate, skip, limit, query, slice)
            body: JSON-serializable request body

        Returns:
            ApiResponse: Parsed response envelope
        """
        return await self.dispatcher.dispatch(method, path, filters, options, body)

    async def close(self) -> None:
        """Close the default transport."""
        if self._owns_transport:
            await self.transport.aclose()

    async def __aenter__(self) -> 'HosbyClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_client(
    base_url: str,
    private_key: str,
    api_key_id: str,
    project_id: str,
    project_name: str,
    user_id: str,
    **kwargs,
) -> HosbyClient:
    """
    Create a Hosby client from keyword arguments.

    Extra keyword arguments are split between ``ClientConfig`` fields and the
    client's injectable collaborators (``transport``, ``signer``,
    ``cookie_store``, ``timestamp_generator``).

    Returns:
        HosbyClient: Configured client
    """
    collaborators = {
        name: kwargs.pop(name)
        for name in ('transport', 'signer', 'cookie_store', 'timestamp_generator')
        if name in kwargs
    }
    config = ClientConfig(
        base_url=base_url,
        private_key=private_key,
        api_key_id=api_key_id,
        project_id=project_id,
        project_name=project_name,
        user_id=user_id,
        **kwargs,
    )
    return HosbyClient(config, **collaborators)
