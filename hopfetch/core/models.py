"""
Data models for fetch operations
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy

from hopfetch.core.progress import ProgressStats


@dataclass
class FetchOptions:
    """Per-call options for FetchEngine.fetch"""
    method: str = "GET"
    headers: Optional[Mapping[str, str]] = None
    data: Optional[bytes] = None
    data_type: str = "application/octet-stream"

    # Download destination, a fresh temporary file when None
    outfile: Optional[Union[str, Path]] = None

    # Caller hooks
    on_start: Optional[Callable[[int, CIMultiDictProxy], Any]] = None
    on_data: Optional[Callable[["DownloadHandle"], Any]] = None
    on_finish: Optional[Callable[[Any, "ResponseSnapshot"], Any]] = None

    # Override Config when set
    timeout: Optional[float] = None
    max_redirects: Optional[int] = None


@dataclass
class ResponseSnapshot:
    """Status line and headers of a single hop"""
    url: str
    status: int
    reason: str = ""
    headers: CIMultiDictProxy = field(default_factory=lambda: CIMultiDictProxy(CIMultiDict()))
    options: FetchOptions = field(default_factory=FetchOptions)

    @classmethod
    def from_response(
        cls,
        response: aiohttp.ClientResponse,
        url: str,
        options: FetchOptions,
    ) -> "ResponseSnapshot":
        return cls(
            url=url,
            status=response.status,
            reason=response.reason or "",
            headers=response.headers,
            options=options,
        )

    @property
    def is_redirect(self) -> bool:
        return self.status in (301, 302)

    @property
    def location(self) -> Optional[str]:
        return self.headers.get("Location")

    @property
    def refresh(self) -> Optional[str]:
        return self.headers.get("Refresh")

    @property
    def set_cookies(self) -> list[str]:
        """All Set-Cookie values, one per header line"""
        return self.headers.getall("Set-Cookie", [])


@dataclass
class DownloadHandle:
    """Describes the sink of a streamed download"""
    path: Path
    bytes_written: int = 0
    closed: bool = False

    # Terminal response, filled in when the download finishes
    status: Optional[int] = None
    url: Optional[str] = None
    headers: Optional[CIMultiDictProxy] = None

    stats: ProgressStats = field(default_factory=ProgressStats)
