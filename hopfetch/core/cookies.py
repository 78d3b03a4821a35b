"""
In-memory cookie jar scoped by hostname and path prefix
"""

import logging
import threading
from typing import Iterable, Optional
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

# Set-Cookie attributes that are never stored as cookies
_ATTRIBUTES = frozenset({
    "domain",
    "expires",
    "max-age",
    "secure",
    "httponly",
    "samesite",
    "priority",
    "partitioned",
})


class CookieJar:
    """
    Process-local cookie store.

    Layout::

        {
            "example.com": {
                "/": {"session": "abc"},
                "/api": {"token": "xyz"},
            },
        }

    Cookies are replayed to every request whose path starts with the path
    they were stored under. Nothing ever expires.
    """

    def __init__(self):
        self._cookies: dict[str, dict[str, dict[str, str]]] = {}
        self._lock = threading.Lock()

    def read(self, url: str) -> Optional[str]:
        """
        Build the Cookie header value for ``url``.

        All paths that prefix the URL path are merged in the order they were
        first stored; a later path overwrites an earlier cookie of the same
        name.

        Returns:
            ``"name=value; name2=value2"`` or None when nothing matches
        """
        parts = urlsplit(url)
        host = parts.hostname or ""
        path = parts.path or "/"

        merged: dict[str, str] = {}
        with self._lock:
            for cookie_path, values in self._cookies.get(host, {}).items():
                if path.startswith(cookie_path):
                    merged.update(values)

        if not merged:
            return None
        return "; ".join(f"{name}={value}" for name, value in merged.items())

    def write(self, url: str, set_cookies: Iterable[str]) -> None:
        """
        Store raw Set-Cookie header values received from ``url``.

        A value without a ``path`` attribute is dropped. ``domain`` and the
        other standard attributes are ignored.
        """
        items: dict[str, dict[str, str]] = {}
        for raw in set_cookies:
            cookie_path = None
            values: dict[str, str] = {}
            for segment in (s.strip() for s in raw.split(";")):
                name, sep, value = segment.partition("=")
                name = name.strip()
                if not sep or not name:
                    # bare flag (Secure, HttpOnly) or empty segment
                    continue
                key = name.lower()
                if key == "path":
                    cookie_path = value.strip()
                elif key not in _ATTRIBUTES:
                    values[name] = value.strip()

            if not cookie_path or not values:
                logger.debug("Dropping cookie without path: %s", raw)
                continue
            items.setdefault(cookie_path, {}).update(values)

        if not items:
            return

        host = urlsplit(url).hostname or ""
        with self._lock:
            paths = self._cookies.setdefault(host, {})
            for cookie_path, values in items.items():
                paths.setdefault(cookie_path, {}).update(values)
        logger.debug("Stored cookies for %s: %s", host, items)

    def clear(self, hostname: Optional[str] = None) -> None:
        """Forget all cookies, or only those of ``hostname``"""
        with self._lock:
            if hostname is None:
                self._cookies.clear()
            else:
                self._cookies.pop(hostname, None)

    def snapshot(self) -> dict[str, dict[str, dict[str, str]]]:
        """Deep copy of the jar contents"""
        with self._lock:
            return {
                host: {path: dict(values) for path, values in paths.items()}
                for host, paths in self._cookies.items()
            }

    def __len__(self) -> int:
        with self._lock:
            return sum(len(v) for paths in self._cookies.values() for v in paths.values())

    def __repr__(self) -> str:
        return f"<CookieJar: {len(self)} cookies>"
