"""
HTTPS enforcement for client base URLs

The policy is evaluated once, when a client is constructed. Hosts listed as
exempt (exact hostname, or a dot-prefixed suffix such as ``.local``) may use
plain HTTP regardless of the mode.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List
from urllib.parse import urlparse

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_EXEMPT_HOSTS = ['localhost', '127.0.0.1', '.local', '.test']

STRICT_VIOLATION_MESSAGE = (
    'HTTPS protocol is required for secure connections. Use https_exempt_hosts to allow '
    'specific hostnames or set https_mode to "warn-log" or "none" for development.'
)
INSECURE_VIOLATION_MESSAGE = (
    'Using insecure HTTP connection. This is not recommended for production environments. '
    'Consider using HTTPS instead.'
)


class HttpsMode(str, Enum):
    """HTTPS enforcement modes"""
    STRICT = "strict"       # Non-HTTPS base URL is a configuration error
    WARN = "warn"           # Same as strict, with the insecure-connection message
    WARN_LOG = "warn-log"   # Log a warning and continue
    NONE = "none"           # No checks


@dataclass
class HttpsPolicy:
    """HTTPS enforcement mode and exempt hosts"""
    mode: HttpsMode = HttpsMode.WARN
    exempt_hosts: List[str] = field(default_factory=lambda: list(DEFAULT_EXEMPT_HOSTS))

    def __post_init__(self):
        try:
            self.mode = HttpsMode(self.mode)
        except ValueError:
            raise ConfigError(
                f"Invalid https_mode: {self.mode!r}. "
                f"Expected one of: {', '.join(m.value for m in HttpsMode)}"
            )

    def validate(self, base_url: str) -> None:
        validate_https(base_url, self.mode, self.exempt_hosts)


def is_exempt_host(base_url: str, exempt_hosts: Iterable[str]) -> bool:
    """
    Check whether a URL's hostname is exempt from HTTPS enforcement.

    Args:
        base_url: URL to check
        exempt_hosts: Exact hostnames, or suffixes starting with '.'

    Returns:
        bool: True if the hostname matches an exempt entry; False for malformed URLs
    """
    try:
        hostname = urlparse(base_url).hostname
    except ValueError:
        return False

    if not hostname:
        return False

    for exempt in exempt_hosts:
        exempt = exempt.lower()
        if exempt.startswith('.'):
            if hostname.endswith(exempt):
                return True
        elif hostname == exempt:
            return True
    return False


def _is_https(base_url: str) -> bool:
    try:
        return urlparse(base_url).scheme.lower() == 'https'
    except ValueError:
        return False


def validate_https(base_url: str, mode: HttpsMode, exempt_hosts: Iterable[str]) -> None:
    """
    Validate a base URL against the HTTPS policy.

    Args:
        base_url: Client base URL
        mode: Enforcement mode
        exempt_hosts: Hostnames exempt from enforcement

    Raises:
        ConfigError: If the URL violates a fatal mode
    """
    mode = HttpsMode(mode)
    if mode == HttpsMode.NONE:
        return

    if _is_https(base_url) or is_exempt_host(base_url, exempt_hosts):
        return

    if mode == HttpsMode.STRICT:
        raise ConfigError(STRICT_VIOLATION_MESSAGE, "HTTPS_REQUIRED")
    if mode == HttpsMode.WARN:
        raise ConfigError(INSECURE_VIOLATION_MESSAGE, "INSECURE_CONNECTION")

    logger.warning(f"{INSECURE_VIOLATION_MESSAGE} (base URL: {base_url})")
