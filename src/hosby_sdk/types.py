"""
Type definitions for the Hosby request pipeline

This module provides the data classes shared by the header builder, the
request dispatcher and the CRUD wrappers: credentials, query filters and
options, protocol profiles and the response envelope.
"""

from typing import Dict, List, Optional, Union, Any, TypedDict
from dataclasses import dataclass, field
from enum import Enum

from .exceptions import ConfigError


CSRF_BOOTSTRAP_PATH = "api/secure/csrf-token"


class HttpMethod(str, Enum):
    """HTTP methods accepted by the dispatcher"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class QueryEncoding(str, Enum):
    """How query options are carried on the wire"""
    DISCRETE = "discrete"   # one header per option
    JSON = "json"           # single JSON-encoded x-query header


@dataclass(frozen=True)
class ClientIdentity:
    """
    Immutable per-client credentials

    Attributes:
        private_key: RSA private key, PEM or raw base64 (optionally sk_ prefixed)
        api_key_id: API key identifier issued by Hosby
        project_id: Project identifier
        project_name: Project name, used to scope resource paths
        user_id: Owning user identifier
    """
    private_key: str
    api_key_id: str
    project_id: str
    project_name: str
    user_id: str

    def __post_init__(self):
        """Validate that every credential is present"""
        missing = [
            name for name in ('private_key', 'api_key_id', 'project_id', 'project_name', 'user_id')
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigError(
                f"Missing required secure config fields: {', '.join(missing)}",
                extra={'missing_fields': missing}
            )

    @property
    def api_key(self) -> str:
        """Composite API key sent as x-api-key and covered by the signature"""
        return f"{self.api_key_id}_{self.project_id}_{self.user_id}"

    def __repr__(self) -> str:
        return (
            f"ClientIdentity(api_key_id={self.api_key_id!r}, project_id={self.project_id!r}, "
            f"project_name={self.project_name!r}, user_id={self.user_id!r})"
        )


@dataclass
class QueryFilter:
    """Single field/value filter; repeated fields become repeated query parameters"""
    field: str
    value: Any = None


@dataclass
class QueryOptions:
    """
    Query options sent as headers

    Attributes:
        populate: Field paths to populate with referenced documents
        skip: Number of documents to skip
        limit: Maximum number of documents to return
        query: Advanced query conditions (MongoDB-style operators)
        slice: Array slicing parameters
    """
    populate: Optional[Union[str, List[str]]] = None
    skip: Optional[int] = None
    limit: Optional[int] = None
    query: Optional[Dict[str, Any]] = None
    slice: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QueryOptions':
        return cls(
            populate=data.get('populate'),
            skip=data.get('skip'),
            limit=data.get('limit'),
            query=data.get('query'),
            slice=data.get('slice'),
        )


@dataclass(frozen=True)
class ProtocolProfile:
    """
    Wire conventions expected by a Hosby deployment

    Attributes:
        name: Profile name
        csrf_header: Request header carrying the CSRF token
        rotation_header: Response header announcing a rotated CSRF token
        query_encoding: Encoding of query options
        csrf_path: Unscoped CSRF bootstrap path
        project_scoped: Whether resource paths are prefixed with the project name
    """
    name: str
    csrf_header: str = "x-csrf-token"
    rotation_header: str = "x-csrf-token"
    query_encoding: QueryEncoding = QueryEncoding.DISCRETE
    csrf_path: str = CSRF_BOOTSTRAP_PATH
    project_scoped: bool = True


DEFAULT_PROFILE = ProtocolProfile(name="default")

LEGACY_PROFILE = ProtocolProfile(
    name="legacy",
    csrf_header="X-CSRF-Token-Hosby",
    rotation_header="X-CSRF-Token-Hosby",
    query_encoding=QueryEncoding.JSON,
)

PROFILES: Dict[str, ProtocolProfile] = {
    'default': DEFAULT_PROFILE,
    'legacy': LEGACY_PROFILE,
}


@dataclass
class SignedRequest:
    """Request as handed to the transport, rebuilt on every dispatch"""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None


class ApiResponse(TypedDict, total=False):
    """Response envelope returned by the Hosby API"""
    success: bool
    status: int
    message: str
    data: Any
