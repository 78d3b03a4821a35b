"""
hopfetch - HTTP(S) fetch engine with redirect, refresh and cookie handling
"""

__version__ = "0.1.0"
__author__ = "drsanjula"
__license__ = "MIT"

from hopfetch.config import Config
from hopfetch.core import (
    CookieJar,
    FetchEngine,
    FetchOptions,
    StreamingDownloader,
    download_file,
    fetch_text,
)

__all__ = [
    "Config",
    "CookieJar",
    "FetchEngine",
    "FetchOptions",
    "StreamingDownloader",
    "download_file",
    "fetch_text",
    "__version__",
]
