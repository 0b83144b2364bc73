"""
Request dispatcher for the Hosby API

Turns a logical operation (method, path, filters, options, body) into an
authenticated wire request, hands it to the transport, and normalizes every
outcome into either the parsed response envelope or a ``HosbyError``.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import quote

from ..csrf import CsrfTokenManager
from ..exceptions import ApiError, HosbyError, TransportError, ValidationError
from ..types import ApiResponse, ClientIdentity, ProtocolProfile, QueryFilter, QueryOptions, SignedRequest
from .headers import HeaderBuilder
from .transport import Transport, TransportResponse

logger = logging.getLogger(__name__)

FilterLike = Union[QueryFilter, Mapping[str, Any]]
OptionsLike = Union[QueryOptions, Mapping[str, Any]]

_RESERVED_ERROR_KEYS = ('success', 'status', 'message')


def _filter_value(value: Any) -> str:
    """Render a filter value as a query-string value."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(',', ':'))
    return str(value)


def group_filters(filters: Iterable[FilterLike]) -> Dict[str, List[Any]]:
    """
    Group filter values by field, keeping first-seen field order.

    Raises:
        ValidationError: If a filter has no field
    """
    grouped: Dict[str, List[Any]] = {}
    for item in filters:
        if isinstance(item, QueryFilter):
            field, value = item.field, item.value
        elif isinstance(item, Mapping):
            field, value = item.get('field'), item.get('value')
        else:
            field, value = None, None

        if not field:
            raise ValidationError("Invalid query filter - missing field")
        grouped.setdefault(field, []).append(value)
    return grouped


def encode_filters(filters: Iterable[FilterLike]) -> str:
    """Encode filters as a query string with repeated parameters per field."""
    pairs: List[Tuple[str, str]] = []
    for field, values in group_filters(filters).items():
        for value in values:
            pairs.append((quote(str(field), safe=''), quote(_filter_value(value), safe='')))
    return '&'.join(f"{key}={value}" for key, value in pairs)


def _is_empty_payload(result: Any) -> bool:
    """JSON values that carry no payload: null, false, 0 and the empty string."""
    if result is None or result is False or result == '':
        return True
    return isinstance(result, (int, float)) and result == 0


def _coerce_options(options: Optional[OptionsLike]) -> Optional[QueryOptions]:
    if options is None or isinstance(options, QueryOptions):
        return options
    return QueryOptions.from_dict(dict(options))


class RequestDispatcher:
    """
    Orchestrates one authenticated request

    Args:
        base_url: API base URL
        identity: Client credentials
        header_builder: Builds signed headers
        csrf: CSRF token manager
        transport: Fetch-compatible transport
        profile: Wire conventions of the target deployment
    """

    def __init__(
        self,
        base_url: str,
        identity: ClientIdentity,
        header_builder: HeaderBuilder,
        csrf: CsrfTokenManager,
        transport: Transport,
        profile: ProtocolProfile,
    ):
        self.base_url = base_url.rstrip('/')
        self.identity = identity
        self.header_builder = header_builder
        self.csrf = csrf
        self.transport = transport
        self.profile = profile
        self.bearer_token: Optional[str] = None
        self.last_request: Optional[SignedRequest] = None

    def is_bootstrap_path(self, path: str) -> bool:
        return path.strip('/') == self.profile.csrf_path.strip('/')

    def build_url(self, path: str, filters: Optional[Sequence[FilterLike]] = None) -> str:
        """
        Build the target URL for a path.

        Resource paths are prefixed with the project name (when the profile is
        project-scoped); the CSRF bootstrap path never is. A trailing slash is
        always enforced and filters are appended as repeated parameters.
        """
        segments = [self.base_url]
        if self.profile.project_scoped and not self.is_bootstrap_path(path):
            segments.append(self.identity.project_name.strip('/'))
        segments.append(path.strip('/'))

        url = '/'.join(segment for segment in segments if segment)
        if not url.endswith('/'):
            url += '/'

        if filters:
            query = encode_filters(filters)
            if query:
                url = f"{url}?{query}"
        return url

    async def fetch_csrf_token(self) -> Dict[str, Any]:
        """Perform the unscoped CSRF bootstrap request."""
        return await self.dispatch('GET', self.profile.csrf_path)

    async def dispatch(
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
            path: Path relative to the project (or the bootstrap path)
            filters: Query filters appended as repeated parameters
            options: Query options sent as headers
            body: JSON-serializable body, ignored for GET

        Returns:
            ApiResponse: Parsed response envelope

        Raises:
            ValidationError: If method or path is missing or a filter is invalid
            TokenError: If the CSRF token cannot be obtained
            ApiError: On non-2xx responses or empty/invalid payloads
            TransportError: On network-level failures
        """
        if not method or not path:
            raise ValidationError("Method and path are required")

        method = str(getattr(method, 'value', method)).upper()
        bootstrap = self.is_bootstrap_path(path)

        try:
            if self.csrf.cookie_enabled:
                self.csrf.sync()

            if not bootstrap and self.csrf.token is None:
                await self.csrf.init(self.fetch_csrf_token)

            url = self.build_url(path, filters)
            headers = self.header_builder.build(
                token=None if bootstrap else self.csrf.token,
                bearer_token=self.bearer_token,
                options=_coerce_options(options),
            )

            payload = None
            if method != 'GET' and body is not None:
                payload = json.dumps(body)

            self.last_request = SignedRequest(method=method, url=url, headers=headers, body=payload)
            logger.debug(f"Dispatching {method} {url}")

            try:
                response = await self.transport(url, method=method, headers=headers, body=payload)
            except Exception as e:
                logger.debug(f"Transport failed for {method} {url}: {e}")
                raise TransportError(str(e) or "Request failed", status=500) from e

            if response is None:
                raise ApiError(500, "Empty response received")

            self._capture_session_headers(response)

            if not response.ok:
                raise await self._error_from_response(response)

            try:
                result = await response.json()
            except ValueError as e:
                raise ApiError(500, f"Invalid JSON response: {e}") from e

            if _is_empty_payload(result):
                raise ApiError(500, "Empty response received")

            return result

        except HosbyError:
            raise
        except Exception as e:
            raise TransportError(str(e) or "Request failed", status=500) from e

    def _capture_session_headers(self, response: TransportResponse) -> None:
        """Capture the bearer token and apply CSRF rotation from response headers."""
        auth_header = response.headers.get('Authorization')
        if auth_header:
            self.bearer_token = auth_header[len('Bearer '):] if auth_header.startswith('Bearer ') else auth_header

        rotated = response.headers.get(self.profile.rotation_header)
        if rotated:
            self.csrf.rotate(rotated)

    async def _error_from_response(self, response: TransportResponse) -> ApiError:
        """Build the normalized error for a non-2xx response."""
        try:
            error_data = await response.json()
        except Exception:
            error_data = None

        if not isinstance(error_data, dict):
            error_data = {'message': response.status_text}

        message = error_data.get('message') or response.status_text or 'Request failed'
        extra = {key: value for key, value in error_data.items() if key not in _RESERVED_ERROR_KEYS}

        logger.debug(f"Request failed with status {response.status}: {message}")
        return ApiError(response.status, message, extra)
