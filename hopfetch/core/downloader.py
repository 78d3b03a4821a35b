"""
Streaming download variant of the fetch engine
"""

import logging
import tempfile
from pathlib import Path
from typing import Optional, Union

import aiofiles
import aiohttp

from hopfetch.config import Config
from hopfetch.core.cookies import CookieJar
from hopfetch.core.delivery import Delivery, call_hook
from hopfetch.core.fetcher import FetchEngine
from hopfetch.core.headers import get_filename_or_url
from hopfetch.core.models import DownloadHandle, FetchOptions, ResponseSnapshot
from hopfetch.core.progress import ProgressTracker

logger = logging.getLogger(__name__)

# Names that would not be a file inside the fresh directory
_UNSAFE_NAMES = frozenset({"", ".", ".."})


class TempFileDestination:
    """
    Default destination: a file inside a fresh temporary directory.

    The file is named after the Content-Disposition filename of the first
    response when there is one, ``Config.default_filename`` otherwise.
    """

    def __init__(self, config: Config):
        self.config = config

    def __call__(self, response: ResponseSnapshot) -> Path:
        parent = None
        if self.config.download_dir:
            Path(self.config.download_dir).mkdir(parents=True, exist_ok=True)
            parent = self.config.download_dir

        directory = Path(tempfile.mkdtemp(prefix=self.config.temp_prefix, dir=parent))
        return directory / self._filename(response)

    def _filename(self, response: ResponseSnapshot) -> str:
        disposition = response.headers.get("Content-Disposition", "")
        token = get_filename_or_url(disposition) if disposition else None
        if token:
            name = Path(token.split(";")[0].strip().strip('"').strip("'")).name
            if name not in _UNSAFE_NAMES and "\x00" not in name:
                return name
        return self.config.default_filename


class SinkDelivery(Delivery):
    """Writes every chunk straight to a file and resolves with a DownloadHandle"""

    def __init__(self, config: Config, options: FetchOptions, destination=None):
        super().__init__(config, options)
        self.destination = destination or TempFileDestination(config)
        self.handle: Optional[DownloadHandle] = None
        self._file = None
        self._tracker = ProgressTracker(interval=config.progress_interval)

    async def on_hop_start(self, response: ResponseSnapshot) -> None:
        if self._file is None:
            await self._open(response)
        else:
            # Same sink across redirects; only the last hop's body is kept
            await self._file.seek(0)
            await self._file.truncate()
            self.handle.bytes_written = 0

        length = response.headers.get("Content-Length")
        self._tracker.reset(int(length) if length and length.isdigit() else None)

    async def _open(self, response: ResponseSnapshot) -> None:
        if self.options.outfile:
            path = Path(self.options.outfile)
            path.parent.mkdir(parents=True, exist_ok=True)
        else:
            path = self.destination(response)

        self._file = await aiofiles.open(path, "wb")
        self.handle = DownloadHandle(path=path)
        logger.debug("Writing download to %s", path)

    async def on_chunk(self, chunk: bytes) -> None:
        await self._file.write(chunk)
        self.handle.bytes_written += len(chunk)

        # The write returning means the sink can take more data
        stats = self._tracker.add(len(chunk))
        if stats is not None:
            self.handle.stats = stats
            if self.options.on_data:
                await call_hook(self.options.on_data, self.handle)

    async def on_terminal(self, response: ResponseSnapshot) -> DownloadHandle:
        await self._close()
        self.handle.status = response.status
        self.handle.url = response.url
        self.handle.headers = response.headers
        self.handle.stats = self._tracker.snapshot()
        return self.handle

    async def release(self) -> None:
        await self._close()

    async def _close(self) -> None:
        """Flush and close the sink; later calls do nothing"""
        if self._file is None or self.handle.closed:
            return
        self.handle.closed = True
        await self._file.close()
        logger.debug("Closed %s (%d bytes)", self.handle.path, self.handle.bytes_written)


class StreamingDownloader(FetchEngine):
    """
    Fetch engine that streams the terminal body to a file.

    Redirects, refreshes and cookies behave exactly as in FetchEngine; the
    result is a DownloadHandle instead of text.

    Usage:
        async with StreamingDownloader() as dl:
            handle = await dl.download(url, output="file.bin")
    """

    delivery_class: type[SinkDelivery] = SinkDelivery

    def __init__(
        self,
        config: Optional[Config] = None,
        cookie_jar: Optional[CookieJar] = None,
        session: Optional[aiohttp.ClientSession] = None,
        destination=None,
    ):
        super().__init__(config=config, cookie_jar=cookie_jar, session=session)
        self.destination = destination or TempFileDestination(self.config)

    def _make_delivery(self, options: FetchOptions) -> SinkDelivery:
        return self.delivery_class(self.config, options, destination=self.destination)

    async def download(
        self,
        url: str,
        output: Optional[Union[str, Path]] = None,
        options: Optional[FetchOptions] = None,
        **overrides,
    ) -> DownloadHandle:
        """
        Download a URL to ``output`` (or a fresh temporary file).

        Returns:
            DownloadHandle of the closed file
        """
        if output is not None:
            overrides["outfile"] = output
        return await self.fetch(url, options, **overrides)


async def download_file(
    url: str,
    output: Optional[Union[str, Path]] = None,
    config: Optional[Config] = None,
    **options,
) -> DownloadHandle:
    """
    Convenience function to download a file.

    Args:
        url: URL to download
        output: Output path, a temporary file when omitted
        config: Settings, loaded from the config file when omitted
        **options: FetchOptions fields (on_data for progress, etc.)

    Returns:
        DownloadHandle of the completed file
    """
    async with StreamingDownloader(config=config) as dl:
        return await dl.download(url, output=output, **options)
