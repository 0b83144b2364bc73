"""
Client configuration for Hosby Python SDK

Provides the validated ``ClientConfig`` consumed by ``HosbyClient`` and
loaders for dictionaries (snake_case or the camelCase keys used by the
JavaScript SDK), JSON files with per-environment sections, and environment
variables.
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import urlparse

from ..csrf import DEFAULT_CSRF_COOKIE_NAME
from ..exceptions import ConfigError
from ..policy import DEFAULT_EXEMPT_HOSTS, HttpsMode, HttpsPolicy
from ..types import ClientIdentity, ProtocolProfile, DEFAULT_PROFILE, PROFILES

ENV_PREFIX = "HOSBY_"

# camelCase keys of the JavaScript configuration surface
_CAMEL_CASE_KEYS = {
    'baseURL': 'base_url',
    'baseUrl': 'base_url',
    'privateKey': 'private_key',
    'apiKeyId': 'api_key_id',
    'projectId': 'project_id',
    'projectName': 'project_name',
    'userId': 'user_id',
    'httpsMode': 'https_mode',
    'httpsExemptHosts': 'https_exempt_hosts',
    'retryAttempts': 'retry_attempts',
    'csrfCookieName': 'csrf_cookie_name',
    'useSameToken': 'use_same_token',
}

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


@dataclass
class ClientConfig:
    """
    Hosby client configuration

    Attributes:
        base_url: API base URL
        private_key: RSA private key used to sign requests
        api_key_id: API key identifier
        project_id: Project identifier
        project_name: Project name used to scope resource paths
        user_id: User identifier
        https_mode: HTTPS enforcement mode
        https_exempt_hosts: Hostnames exempt from HTTPS enforcement
        timeout: Transport timeout in seconds (None disables it)
        retry_attempts: Transport-level retries
        csrf_cookie_name: Cookie used to mirror the CSRF token
        use_same_token: Keep the first CSRF token and ignore rotation headers
        profile: Wire conventions of the target deployment
    """
    base_url: str
    private_key: str = field(default='', repr=False)
    api_key_id: str = ''
    project_id: str = ''
    project_name: str = ''
    user_id: str = ''
    https_mode: HttpsMode = HttpsMode.WARN
    https_exempt_hosts: List[str] = field(default_factory=lambda: list(DEFAULT_EXEMPT_HOSTS))
    timeout: Optional[float] = 30.0
    retry_attempts: int = 0
    csrf_cookie_name: str = DEFAULT_CSRF_COOKIE_NAME
    use_same_token: bool = False
    profile: ProtocolProfile = DEFAULT_PROFILE

    def __post_init__(self):
        """Validate client configuration."""
        if not self.base_url:
            raise ConfigError("Base URL is required")

        parsed = urlparse(self.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigError(f"Invalid base URL format: {self.base_url}")

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError("Timeout must be positive")

        if self.retry_attempts < 0:
            raise ConfigError("Retry attempts must be non-negative")

        if isinstance(self.profile, str):
            if self.profile not in PROFILES:
                raise ConfigError(
                    f"Unknown protocol profile '{self.profile}'. Expected one of: {', '.join(PROFILES)}"
                )
            self.profile = PROFILES[self.profile]

        # Normalizes and validates the mode
        self.https_mode = HttpsPolicy(self.https_mode, list(self.https_exempt_hosts)).mode

        self.identity()

    def identity(self) -> ClientIdentity:
        """Build the client identity, validating every credential."""
        return ClientIdentity(
            private_key=self.private_key,
            api_key_id=self.api_key_id,
            project_id=self.project_id,
            project_name=self.project_name,
            user_id=self.user_id,
        )

    def https_policy(self) -> HttpsPolicy:
        return HttpsPolicy(self.https_mode, list(self.https_exempt_hosts))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ClientConfig':
        """
        Create configuration from a dictionary.

        Accepts snake_case field names and the camelCase keys used by the
        JavaScript SDK. Unknown keys are rejected.
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        unknown = []
        for key, value in data.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name in known:
                kwargs[name] = value
            else:
                unknown.append(key)

        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        if 'base_url' not in kwargs:
            raise ConfigError("Base URL is required")

        return cls(**kwargs)

    @classmethod
    def from_json(cls, json_string: str, environment: Optional[str] = None) -> 'ClientConfig':
        """
        Create configuration from a JSON document.

        The document is either a flat configuration object or
        ``{"environments": {name: {...}}, "defaults": {"environment": name}}``.
        """
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR") from e

        if not isinstance(data, dict):
            raise ConfigError("Configuration JSON must be an object", "INVALID_FORMAT")

        if 'environments' in data:
            environments = data['environments']
            name = environment or data.get('defaults', {}).get('environment')
            if not name or name not in environments:
                raise ConfigError(f"Environment '{name}' not found", "ENVIRONMENT_NOT_FOUND")
            data = environments[name]

        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path], environment: Optional[str] = None) -> 'ClientConfig':
        """Load configuration from a JSON file"""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ConfigError(f"Failed to read configuration file: {e}", "FILE_ERROR") from e
        return cls.from_json(json_string, environment)

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, environ: Optional[Mapping[str, str]] = None) -> 'ClientConfig':
        """
        Load configuration from environment variables.

        Variables are the upper-cased field names with ``prefix``, e.g.
        ``HOSBY_BASE_URL``; ``HOSBY_HTTPS_EXEMPT_HOSTS`` is comma-separated.
        """
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}

        for f in fields(cls):
            raw = environ.get(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            try:
                if f.name == 'https_exempt_hosts':
                    data[f.name] = [host.strip() for host in raw.split(',') if host.strip()]
                elif f.name == 'timeout':
                    data[f.name] = float(raw) if raw else None
                elif f.name == 'retry_attempts':
                    data[f.name] = int(raw)
                elif f.name == 'use_same_token':
                    data[f.name] = raw.strip().lower() in _TRUE_VALUES
                else:
                    data[f.name] = raw
            except ValueError as e:
                raise ConfigError(f"Invalid value for {prefix}{f.name.upper()}: {raw!r}") from e

        return cls.from_dict(data)


def load_config(file_path: Union[str, Path], environment: Optional[str] = None) -> ClientConfig:
    """Load client configuration from a JSON file"""
    return ClientConfig.from_file(file_path, environment)
