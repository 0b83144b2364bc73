"""
Authenticated header construction

Builds the header set for a single request: content negotiation, CSRF token,
captured bearer token, the signature triad (``x-signature``, ``x-timestamp``,
``x-api-key``) and query-option headers in the encoding selected by the
protocol profile.
"""

import json
import logging
from typing import Any, Callable, Dict, Optional

from ..signing import Signer, compose_payload, generate_timestamp
from ..types import ClientIdentity, ProtocolProfile, QueryEncoding, QueryOptions, DEFAULT_PROFILE

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-signature"
TIMESTAMP_HEADER = "x-timestamp"
API_KEY_HEADER = "x-api-key"
QUERY_HEADER = "x-query"


def _encode_header_value(value: Any) -> str:
    """Encode a query option for a discrete header."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(',', ':'))


def query_option_fields(options: QueryOptions) -> Dict[str, Any]:
    """
    Collect the set query options keyed by their header name.

    ``skip`` and ``limit`` are only included when they are integers; the other
    options only when truthy.
    """
    fields: Dict[str, Any] = {}
    if options.populate:
        fields['x-populate'] = options.populate
    if isinstance(options.skip, int) and not isinstance(options.skip, bool):
        fields['x-skip'] = options.skip
    if isinstance(options.limit, int) and not isinstance(options.limit, bool):
        fields['x-limit'] = options.limit
    if options.query:
        fields['x-query'] = options.query
    if options.slice:
        fields['x-slice'] = options.slice
    return fields


class HeaderBuilder:
    """
    Assembles authenticated request headers

    Args:
        identity: Client credentials
        signer: Signer producing the x-signature value
        profile: Wire conventions of the target deployment
        timestamp_generator: Returns the current time in epoch milliseconds
    """

    def __init__(
        self,
        identity: ClientIdentity,
        signer: Signer,
        profile: ProtocolProfile = DEFAULT_PROFILE,
        timestamp_generator: Optional[Callable[[], int]] = None,
    ):
        self.identity = identity
        self.signer = signer
        self.profile = profile
        self.timestamp_generator = timestamp_generator or generate_timestamp

    def build(
        self,
        token: Optional[str] = None,
        bearer_token: Optional[str] = None,
        options: Optional[QueryOptions] = None,
    ) -> Dict[str, str]:
        """
        Build headers for one request.

        Args:
            token: Current CSRF token, if any
            bearer_token: Bearer token captured from a previous response
            options: Query options to encode

        Returns:
            dict: Header name to value

        Raises:
            SigningError: If the signature cannot be produced
        """
        headers: Dict[str, str] = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }

        if token:
            headers[self.profile.csrf_header] = token

        if bearer_token:
            headers['Authorization'] = f'Bearer {bearer_token}'

        headers.update(self.signature_headers())

        if options is not None:
            headers.update(self.query_headers(options))

        return headers

    def signature_headers(self) -> Dict[str, str]:
        """Compute a fresh signature triad bound to the current timestamp."""
        timestamp = str(self.timestamp_generator())
        api_key = self.identity.api_key
        signature = self.signer.sign(compose_payload(api_key, timestamp), self.identity.private_key)

        return {
            SIGNATURE_HEADER: signature,
            TIMESTAMP_HEADER: timestamp,
            API_KEY_HEADER: api_key,
        }

    def query_headers(self, options: QueryOptions) -> Dict[str, str]:
        """Encode query options per the profile's query encoding."""
        fields = query_option_fields(options)
        if not fields:
            return {}

        if self.profile.query_encoding == QueryEncoding.JSON:
            return {QUERY_HEADER: json.dumps(fields)}

        return {name: _encode_header_value(value) for name, value in fields.items()}
