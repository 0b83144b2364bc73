"""
Cookie storage capability for CSRF token mirroring

Hosts that share the CSRF token with a browser or another process inject a
``CookieStore``. The client never inspects its environment to decide whether
cookies are available: no store, no cookie mirroring.
"""

import time
from http.cookies import SimpleCookie
from typing import Callable, Dict, Optional, Protocol, runtime_checkable

DEFAULT_COOKIE_MAX_AGE = 7 * 24 * 60 * 60
DEFAULT_COOKIE_PATH = "/"
DEFAULT_SAME_SITE = "Strict"


@runtime_checkable
class CookieStore(Protocol):
    """Protocol for cookie stores used to share the CSRF token"""

    def get(self, name: str) -> Optional[str]:
        """Return the cookie value, or None when absent or expired"""
        ...

    def set(
        self,
        name: str,
        value: str,
        max_age: int = DEFAULT_COOKIE_MAX_AGE,
        path: str = DEFAULT_COOKIE_PATH,
        same_site: str = DEFAULT_SAME_SITE,
    ) -> None:
        """Store a cookie"""
        ...


class MemoryCookieStore:
    """
    In-process cookie store

    Cookies are kept as ``http.cookies`` morsels so their attributes can be
    rendered as ``Set-Cookie`` header values; expiry follows ``Max-Age``.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._jar = SimpleCookie()
        self._expires_at: Dict[str, float] = {}
        self._clock = clock

    def get(self, name: str) -> Optional[str]:
        morsel = self._jar.get(name)
        if morsel is None:
            return None
        if self._clock() >= self._expires_at.get(name, float('inf')):
            self.delete(name)
            return None
        return morsel.value

    def set(
        self,
        name: str,
        value: str,
        max_age: int = DEFAULT_COOKIE_MAX_AGE,
        path: str = DEFAULT_COOKIE_PATH,
        same_site: str = DEFAULT_SAME_SITE,
    ) -> None:
        self._jar[name] = value
        morsel = self._jar[name]
        morsel['max-age'] = max_age
        morsel['path'] = path
        morsel['samesite'] = same_site
        self._expires_at[name] = self._clock() + max_age

    def delete(self, name: str) -> None:
        self._jar.pop(name, None)
        self._expires_at.pop(name, None)

    def header(self, name: str) -> Optional[str]:
        """Render a stored cookie as a ``Set-Cookie`` header value."""
        if self.get(name) is None:
            return None
        return self._jar[name].OutputString()

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __len__(self) -> int:
        return len(self._jar)
