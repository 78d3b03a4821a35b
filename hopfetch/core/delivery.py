"""
Body delivery strategies for the fetch loop
"""

from abc import ABC, abstractmethod
import codecs
import inspect
import re
from typing import Any, Callable, Optional

from hopfetch.config import Config
from hopfetch.core.models import FetchOptions, ResponseSnapshot

_CHARSET = re.compile(r"charset=[\"']?([\w.:-]+)", re.IGNORECASE)


async def call_hook(hook: Callable[..., Any], *args) -> Any:
    """Call a caller-supplied hook, awaiting it if it returns an awaitable"""
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class Delivery(ABC):
    """
    Receives the body of every hop of one fetch call.

    The engine calls, per hop, ``on_hop_start`` once, then ``on_chunk`` for
    each body chunk in arrival order. After the terminal hop it calls
    ``on_terminal`` whose return value becomes the result of the fetch. If
    the fetch fails or is cancelled, ``release`` is called instead.

    A new instance is created for every fetch call.
    """

    def __init__(self, config: Config, options: FetchOptions):
        self.config = config
        self.options = options

    @abstractmethod
    async def on_hop_start(self, response: ResponseSnapshot) -> None:
        """Headers of a hop were received; reset per-hop state"""

    @abstractmethod
    async def on_chunk(self, chunk: bytes) -> None:
        """A body chunk arrived"""

    @abstractmethod
    async def on_terminal(self, response: ResponseSnapshot) -> Any:
        """Produce the result of the fetch"""

    async def release(self) -> None:
        """Free resources on a failed or cancelled fetch"""
        return None


class TextDelivery(Delivery):
    """Aggregates the body in memory and resolves with decoded text"""

    def __init__(self, config: Config, options: FetchOptions):
        super().__init__(config, options)
        self._chunks: list[bytes] = []

    async def on_hop_start(self, response: ResponseSnapshot) -> None:
        self._chunks = []

    async def on_chunk(self, chunk: bytes) -> None:
        self._chunks.append(chunk)

    async def on_terminal(self, response: ResponseSnapshot) -> Optional[str]:
        body = b"".join(self._chunks)
        if not (200 <= response.status < 400) or not body:
            return None
        return body.decode(self._encoding(response), errors="replace")

    @staticmethod
    def _encoding(response: ResponseSnapshot) -> str:
        match = _CHARSET.search(response.headers.get("Content-Type", ""))
        if match:
            try:
                return codecs.lookup(match.group(1)).name
            except LookupError:
                pass
        return "utf-8"
