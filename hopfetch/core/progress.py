"""
Progress accounting for streamed downloads
"""

from dataclasses import dataclass
from typing import Callable, Optional
import time


@dataclass
class ProgressStats:
    """Snapshot of a download in progress"""
    downloaded: int = 0
    total: Optional[int] = None  # Content-Length of the current hop, if sent
    speed: float = 0.0  # bytes per second
    eta: Optional[float] = None  # seconds remaining
    elapsed: float = 0.0

    @property
    def progress(self) -> Optional[float]:
        """Progress as percentage (0-100), None when the total is unknown"""
        if not self.total:
            return None
        return (self.downloaded / self.total) * 100

    @property
    def speed_human(self) -> str:
        return format_size(self.speed) + "/s"

    @property
    def eta_human(self) -> str:
        if self.eta is None:
            return "Unknown"
        return format_time(self.eta)


class ProgressTracker:
    """
    Counts bytes written to a sink and emits throttled ProgressStats.

    The callback fires at most once per ``interval`` seconds; an interval of
    zero emits on every write.
    """

    def __init__(
        self,
        callback: Optional[Callable[[ProgressStats], None]] = None,
        interval: float = 0.1,
        window: int = 10,
    ):
        self.callback = callback
        self.interval = interval
        self.window = window

        self.total: Optional[int] = None
        self.downloaded = 0
        self.start_time: Optional[float] = None
        self._last_emit = 0.0
        self._last_downloaded = 0
        self._samples: list[float] = []

    def reset(self, total: Optional[int] = None) -> None:
        """Start counting from zero, e.g. when a new hop replaces the body"""
        now = time.monotonic()
        self.total = total
        self.downloaded = 0
        self.start_time = now
        self._last_emit = now
        self._last_downloaded = 0
        self._samples.clear()

    def add(self, nbytes: int) -> Optional[ProgressStats]:
        """Account for ``nbytes`` more bytes; returns the stats if emitted"""
        if self.start_time is None:
            self.reset()
        self.downloaded += nbytes

        now = time.monotonic()
        if now - self._last_emit < self.interval:
            return None
        return self._emit(now)

    def _emit(self, now: float) -> ProgressStats:
        elapsed_since = now - self._last_emit
        if elapsed_since > 0:
            self._samples.append((self.downloaded - self._last_downloaded) / elapsed_since)
            if len(self._samples) > self.window:
                self._samples.pop(0)

        stats = self.snapshot(now)
        if self.callback:
            self.callback(stats)

        self._last_emit = now
        self._last_downloaded = self.downloaded
        return stats

    def snapshot(self, now: Optional[float] = None) -> ProgressStats:
        """Current stats without notifying the callback"""
        now = now if now is not None else time.monotonic()
        speed = sum(self._samples) / len(self._samples) if self._samples else 0.0

        eta = None
        if speed > 0 and self.total:
            eta = max(self.total - self.downloaded, 0) / speed

        return ProgressStats(
            downloaded=self.downloaded,
            total=self.total,
            speed=speed,
            eta=eta,
            elapsed=now - (self.start_time or now),
        )


def format_size(size_bytes: float) -> str:
    """Format bytes to human-readable string"""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if abs(size_bytes) < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"


def format_time(seconds: float) -> str:
    """Format seconds to human-readable string"""
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        return f"{seconds // 60:.0f}m {seconds % 60:.0f}s"
    else:
        return f"{seconds // 3600:.0f}h {(seconds % 3600) // 60:.0f}m"
