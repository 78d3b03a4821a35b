"""
Custom exceptions for hopfetch
"""

from typing import Optional


class HopFetchError(Exception):
    """Base exception for all hopfetch errors"""

    def __init__(self, message: str, url: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class FetchError(HopFetchError):
    """Protocol-level failure while following a fetch"""
    pass


class RedirectError(FetchError):
    """301/302 response without a Location header"""
    pass


class RefreshError(FetchError):
    """Refresh header present but no URL could be parsed from it"""
    pass


class TooManyRedirectsError(FetchError):
    """Redirect/refresh chain exceeded the configured hop limit"""
    pass


class TransportError(HopFetchError):
    """Connection or socket failure reported by the transport"""
    pass


class FetchTimeoutError(TransportError):
    """Operation deadline expired"""
    pass


class UnsupportedURLError(HopFetchError):
    """URL scheme is not http/https or the URL has no host"""
    pass


class ConfigError(HopFetchError):
    """Configuration error"""
    pass
