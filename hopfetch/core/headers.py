"""
Header and URL helpers for the redirect loop
"""

import re
from typing import Optional
from urllib.parse import urljoin, urlsplit

from multidict import CIMultiDict

from hopfetch.config import Config
from hopfetch.core.models import FetchOptions
from hopfetch.exceptions import UnsupportedURLError

_FILENAME_OR_URL = re.compile(r"(filename|url)=(.*)", re.IGNORECASE)
_ABSOLUTE_HTTP = re.compile(r"^https?://")

_DEFAULT_PORTS = {"http": 80, "https": 443}


def get_filename_or_url(value: str) -> Optional[str]:
    """
    Get the token following ``filename=`` or ``url=`` in a header value.

    Works for both ``Refresh: 0; url=/next`` and
    ``Content-Disposition: attachment; filename="a.bin"``. One layer of
    matching single or double quotes is stripped.

    Returns:
        The unquoted token, or None if the pattern is absent or empty
    """
    match = _FILENAME_OR_URL.search(value or "")
    if not match:
        return None

    token = match.group(2).strip()
    for quote in ('"', "'"):
        if len(token) >= 2 and token[0] == quote and token[-1] == quote:
            token = token[1:-1]
            break

    return token or None


def check_url(url: str) -> None:
    """Raise UnsupportedURLError unless ``url`` is an absolute http(s) URL"""
    parts = urlsplit(url)
    if parts.scheme.lower() not in _DEFAULT_PORTS:
        raise UnsupportedURLError(f"Unsupported URL scheme: {url}", url=url)
    if not parts.hostname:
        raise UnsupportedURLError(f"URL has no host: {url}", url=url)


def origin_of(url: str) -> str:
    """``scheme://host[:port]`` of a URL, default ports omitted"""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"

    port = parts.port
    if port and port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"

    return f"{scheme}://{host}"


def resolve_location(current_url: str, location: str) -> str:
    """Target of a 301/302; relative references resolve against the current URL"""
    return urljoin(current_url, location)


def resolve_refresh(current_url: str, location: str) -> str:
    """Target of a Refresh header: absolute URL, or a path on the current origin"""
    if _ABSOLUTE_HTTP.match(location):
        return location
    # Literal concatenation, no dot-segment normalization
    return origin_of(current_url) + location


def build_request_headers(config: Config, options: FetchOptions) -> CIMultiDict:
    """Base headers for every hop of a fetch; origin/referer/cookie are added per hop"""
    headers = CIMultiDict()
    headers["User-Agent"] = config.user_agent
    headers["Accept"] = config.accept

    if options.headers:
        for name, value in options.headers.items():
            headers[name] = value

    if options.data is not None:
        headers["Content-Type"] = options.data_type or "application/octet-stream"
        headers["Content-Length"] = str(len(options.data))

    return headers
