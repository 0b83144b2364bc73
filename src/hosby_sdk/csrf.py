"""
CSRF token lifecycle management

The token is fetched once from the unscoped bootstrap endpoint, cached in
memory and, when a cookie store is injected, mirrored into a cookie so other
clients sharing the store can adopt it. Once populated in this process the
in-memory value wins; the cookie is consulted only while memory is empty.
"""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from .cookies import CookieStore, DEFAULT_COOKIE_MAX_AGE, DEFAULT_COOKIE_PATH, DEFAULT_SAME_SITE
from .exceptions import TokenError

logger = logging.getLogger(__name__)

DEFAULT_CSRF_COOKIE_NAME = "hosby_csrf_token"

TokenFetcher = Callable[[], Awaitable[Dict[str, Any]]]


class TokenState(Enum):
    """CSRF token lifecycle states"""
    ABSENT = "absent"
    FETCHING = "fetching"
    FETCHED = "fetched"
    ROTATED = "rotated"


def extract_token(response: Any) -> str:
    """
    Extract the CSRF token from a bootstrap response.

    Args:
        response: Parsed ``{success, status, data: {token}}`` envelope

    Returns:
        str: The token

    Raises:
        TokenError: If the response is unsuccessful or carries no token
    """
    if not isinstance(response, dict) or not response.get('success'):
        raise TokenError("Failed to fetch CSRF token")

    data = response.get('data')
    if not data:
        raise TokenError("Invalid CSRF token response: missing data")

    if isinstance(data, dict):
        token = data.get('token')
    elif isinstance(data, str):
        token = data
    else:
        token = None

    if not token:
        raise TokenError("Invalid CSRF token response: token missing from response data")

    return token


class CsrfTokenManager:
    """
    Fetches, caches and synchronizes the CSRF token

    Args:
        cookie_store: Optional cookie capability used to mirror the token
        cookie_name: Cookie holding the token
        rotation_enabled: Whether rotation headers replace the cached token
    """

    def __init__(
        self,
        cookie_store: Optional[CookieStore] = None,
        cookie_name: str = DEFAULT_CSRF_COOKIE_NAME,
        rotation_enabled: bool = True,
    ):
        self.cookie_store = cookie_store
        self.cookie_name = cookie_name
        self.rotation_enabled = rotation_enabled
        self._token: Optional[str] = None
        self.state = TokenState.ABSENT

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def cookie_enabled(self) -> bool:
        return self.cookie_store is not None

    async def init(self, fetch: TokenFetcher) -> str:
        """
        Make a token available, adopting the cookie value when possible.

        Args:
            fetch: Coroutine function performing the bootstrap GET

        Returns:
            str: The current token

        Raises:
            TokenError: If the bootstrap response does not carry a token
        """
        cookie_token = self._read_cookie()
        if cookie_token:
            logger.debug("Adopted CSRF token from cookie store")
            self._token = cookie_token
            self.state = TokenState.FETCHED
            return cookie_token

        self.state = TokenState.FETCHING
        try:
            token = extract_token(await fetch())
        except BaseException:
            self.state = TokenState.FETCHED if self._token else TokenState.ABSENT
            raise

        self._store(token)
        self.state = TokenState.FETCHED
        logger.info("CSRF token fetched")
        return token

    def sync(self) -> None:
        """Reconcile the in-memory token with the cookie store."""
        if not self.cookie_enabled:
            return

        cookie_token = self._read_cookie()
        if self._token is None:
            if cookie_token:
                logger.debug("Adopted CSRF token from cookie store during sync")
                self._token = cookie_token
                self.state = TokenState.FETCHED
        elif cookie_token != self._token:
            self._write_cookie(self._token)

    def rotate(self, new_token: Optional[str]) -> bool:
        """
        Replace the cached token with a server-rotated value.

        Returns:
            bool: True if the token changed
        """
        if not self.rotation_enabled or not new_token or new_token == self._token:
            return False

        self._store(new_token)
        self.state = TokenState.ROTATED
        logger.debug("CSRF token rotated by server")
        return True

    def _store(self, token: str) -> None:
        self._token = token
        self._write_cookie(token)

    def _read_cookie(self) -> Optional[str]:
        if self.cookie_store is None:
            return None
        return self.cookie_store.get(self.cookie_name)

    def _write_cookie(self, token: str) -> None:
        if self.cookie_store is None:
            return
        self.cookie_store.set(
            self.cookie_name,
            token,
            max_age=DEFAULT_COOKIE_MAX_AGE,
            path=DEFAULT_COOKIE_PATH,
            same_site=DEFAULT_SAME_SITE,
        )
