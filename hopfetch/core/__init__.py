"""
Core fetch engine for hopfetch
"""

from hopfetch.core.cookies import CookieJar
from hopfetch.core.delivery import Delivery, TextDelivery
from hopfetch.core.downloader import SinkDelivery, StreamingDownloader, TempFileDestination, download_file
from hopfetch.core.fetcher import FetchEngine, fetch_text
from hopfetch.core.headers import get_filename_or_url
from hopfetch.core.models import DownloadHandle, FetchOptions, ResponseSnapshot
from hopfetch.core.progress import ProgressTracker, ProgressStats, format_size, format_time

__all__ = [
    "CookieJar",
    "Delivery",
    "TextDelivery",
    "SinkDelivery",
    "StreamingDownloader",
    "TempFileDestination",
    "download_file",
    "FetchEngine",
    "fetch_text",
    "get_filename_or_url",
    "DownloadHandle",
    "FetchOptions",
    "ResponseSnapshot",
    "ProgressTracker",
    "ProgressStats",
    "format_size",
    "format_time",
]
