"""
HTTP client module for Hosby SDK

This module provides the request pipeline: header construction with automatic
signature injection, the request dispatcher, and the transports it runs on.
"""

from .headers import (
    HeaderBuilder,
    query_option_fields,
)
from .dispatcher import (
    RequestDispatcher,
    encode_filters,
    group_filters,
)
from .transport import (
    Transport,
    TransportResponse,
    HttpxTransport,
    HttpxResponse,
    RequestsTransport,
    RequestsResponse,
)

__all__ = [
    'HeaderBuilder',
    'query_option_fields',
    'RequestDispatcher',
    'encode_filters',
    'group_filters',
    'Transport',
    'TransportResponse',
    'HttpxTransport',
    'HttpxResponse',
    'RequestsTransport',
    'RequestsResponse',
]
