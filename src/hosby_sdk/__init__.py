"""
Hosby Python SDK
Signed, CSRF-protected client for the Hosby API
"""

from .version import __version__
from .client import (
    HosbyClient,
    create_client,
)
from .config import (
    ClientConfig,
    load_config,
)
from .cookies import (
    CookieStore,
    MemoryCookieStore,
)
from .auth import AuthClient
from .crud import CrudClient
from .csrf import (
    CsrfTokenManager,
    TokenState,
    extract_token,
)
from .exceptions import (
    HosbyError,
    ConfigError,
    ValidationError,
    SigningError,
    TokenError,
    TransportError,
    ApiError,
)
from .http_clients import (
    HeaderBuilder,
    RequestDispatcher,
    Transport,
    TransportResponse,
    HttpxTransport,
    RequestsTransport,
)
from .policy import (
    HttpsMode,
    HttpsPolicy,
    is_exempt_host,
    validate_https,
)
from .signing import (
    RequestSigner,
    Signer,
    format_pem,
    verify_signature,
)
from .types import (
    ApiResponse,
    ClientIdentity,
    HttpMethod,
    ProtocolProfile,
    QueryEncoding,
    QueryFilter,
    QueryOptions,
    SignedRequest,
    DEFAULT_PROFILE,
    LEGACY_PROFILE,
)

__all__ = [
    '__version__',
    # Client
    'HosbyClient',
    'create_client',
    'CrudClient',
    'AuthClient',
    # Configuration
    'ClientConfig',
    'load_config',
    'HttpsMode',
    'HttpsPolicy',
    'is_exempt_host',
    'validate_https',
    # CSRF and cookies
    'CookieStore',
    'MemoryCookieStore',
    'CsrfTokenManager',
    'TokenState',
    'extract_token',
    # Exceptions
    'HosbyError',
    'ConfigError',
    'ValidationError',
    'SigningError',
    'TokenError',
    'TransportError',
    'ApiError',
    # Request pipeline
    'HeaderBuilder',
    'RequestDispatcher',
    'Transport',
    'TransportResponse',
    'HttpxTransport',
    'RequestsTransport',
    'RequestSigner',
    'Signer',
    'format_pem',
    'verify_signature',
    # Types
    'ApiResponse',
    'ClientIdentity',
    'HttpMethod',
    'ProtocolProfile',
    'QueryEncoding',
    'QueryFilter',
    'QueryOptions',
    'SignedRequest',
    'DEFAULT_PROFILE',
    'LEGACY_PROFILE',
]
