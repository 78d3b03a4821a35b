"""
Async fetch engine with redirect, refresh and cookie handling
"""

import asyncio
import logging
from dataclasses import replace
from typing import Any, Optional

import aiohttp
from multidict import CIMultiDict

from hopfetch.config import Config
from hopfetch.core.cookies import CookieJar
from hopfetch.core.delivery import Delivery, TextDelivery, call_hook
from hopfetch.core.headers import (
    build_request_headers,
    check_url,
    get_filename_or_url,
    origin_of,
    resolve_location,
    resolve_refresh,
)
from hopfetch.core.models import FetchOptions, ResponseSnapshot
from hopfetch.exceptions import (
    FetchTimeoutError,
    RedirectError,
    RefreshError,
    TooManyRedirectsError,
    TransportError,
)

logger = logging.getLogger(__name__)


class FetchEngine:
    """
    Fetches a URL, chasing 301/302 redirects and Refresh headers.

    Features:
    - Cookies from terminal responses are kept per host and path and sent
      on later requests, including later hops of the same chain
    - Response bodies go to a Delivery strategy (text by default)
    - Optional hop limit and per-operation deadline

    Usage:
        async with FetchEngine() as engine:
            text = await engine.fetch("https://example.com/")
    """

    delivery_class: type[Delivery] = TextDelivery

    def __init__(
        self,
        config: Optional[Config] = None,
        cookie_jar: Optional[CookieJar] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.config = config or Config.load()
        self.cookie_jar = cookie_jar if cookie_jar is not None else CookieJar()
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        await self._create_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _create_session(self) -> None:
        """Create aiohttp session"""
        if self._session is None or self._session.closed:
            # Cookies are handled by our own jar, deadlines by fetch()
            self._session = aiohttp.ClientSession(
                cookie_jar=aiohttp.DummyCookieJar(),
                timeout=aiohttp.ClientTimeout(total=None),
            )
            self._owns_session = True

    async def close(self) -> None:
        """Close the session if we own it"""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def _make_delivery(self, options: FetchOptions) -> Delivery:
        return self.delivery_class(self.config, options)

    async def fetch(self, url: str, options: Optional[FetchOptions] = None, **overrides) -> Any:
        """
        Fetch a URL.

        Args:
            url: Absolute http(s) URL
            options: Request options; keyword arguments override its fields
                (or build one when omitted)

        Returns:
            Whatever the delivery strategy produces for the terminal
            response: decoded text (or None) for the default engine

        Raises:
            RedirectError: 301/302 without Location
            RefreshError: Refresh header without a URL
            TooManyRedirectsError: More hops than max_redirects
            TransportError: Connection failure at any hop
            FetchTimeoutError: The deadline expired
            UnsupportedURLError: URL is not http(s)
        """
        if options is None:
            options = FetchOptions(**overrides)
        elif overrides:
            options = replace(options, **overrides)
        if isinstance(options.data, str):
            options = replace(options, data=options.data.encode("utf-8"))

        check_url(url)
        await self._create_session()

        timeout = options.timeout if options.timeout is not None else self.config.timeout
        delivery = self._make_delivery(options)

        if timeout is None:
            return await self._run(url, options, delivery)
        try:
            return await asyncio.wait_for(self._run(url, options, delivery), timeout)
        except asyncio.TimeoutError as e:
            raise FetchTimeoutError(f"Fetching {url} took longer than {timeout}s", url=url) from e

    async def _run(self, url: str, options: FetchOptions, delivery: Delivery) -> Any:
        """The redirect loop; releases the delivery on any failure"""
        base_headers = build_request_headers(self.config, options)
        max_redirects = (
            options.max_redirects if options.max_redirects is not None else self.config.max_redirects
        )

        hops = 0
        finished = False
        try:
            while True:
                response = await self._hop(url, options, base_headers, delivery)
                target = self._next_url(response)
                if target is None:
                    break

                hops += 1
                if max_redirects is not None and hops > max_redirects:
                    raise TooManyRedirectsError(
                        f"Exceeded {max_redirects} redirects",
                        url=url,
                        status=response.status,
                    )
                check_url(target)
                logger.debug("%d %s -> %s", response.status, url, target)
                url = target

            if response.set_cookies:
                self.cookie_jar.write(url, response.set_cookies)

            result = await delivery.on_terminal(response)
            finished = True
        finally:
            if not finished:
                await delivery.release()

        logger.debug("%d %s (terminal after %d hops)", response.status, url, hops)
        if options.on_finish:
            await call_hook(options.on_finish, result, response)
        return result

    async def _hop(
        self,
        url: str,
        options: FetchOptions,
        base_headers: CIMultiDict,
        delivery: Delivery,
    ) -> ResponseSnapshot:
        """Issue one request and stream its body into the delivery"""
        headers = CIMultiDict(base_headers)
        origin = origin_of(url)
        headers["Origin"] = origin
        headers["Referer"] = origin
        # The jar is the only source of cookies
        headers.popall("Cookie", None)
        cookie = self.cookie_jar.read(url)
        if cookie:
            headers["Cookie"] = cookie

        method = (options.method or "GET").upper()
        logger.debug("%s %s", method, url)

        try:
            async with self._session.request(
                method,
                url,
                headers=headers,
                data=options.data,
                allow_redirects=False,
            ) as resp:
                response = ResponseSnapshot.from_response(resp, url, options)
                await delivery.on_hop_start(response)
                if options.on_start:
                    await call_hook(options.on_start, response.status, response.headers)

                async for chunk in resp.content.iter_any():
                    await delivery.on_chunk(chunk)
        except aiohttp.ServerTimeoutError as e:
            raise FetchTimeoutError(f"Timed out waiting for {url}: {e}", url=url) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Request to {url} failed: {e}", url=url) from e

        return response

    @staticmethod
    def _next_url(response: ResponseSnapshot) -> Optional[str]:
        """Where a hop points to next, or None if it is terminal"""
        if response.is_redirect:
            location = response.location
            if not location:
                raise RedirectError("No redirection to follow", url=response.url, status=response.status)
            return resolve_location(response.url, location)

        refresh = response.refresh
        if refresh:
            location = get_filename_or_url(refresh)
            if not location:
                raise RefreshError("Got refresh without URL", url=response.url, status=response.status)
            return resolve_refresh(response.url, location)

        return None


async def fetch_text(url: str, config: Optional[Config] = None, **options) -> Optional[str]:
    """
    Convenience function to fetch a URL as text.

    Args:
        url: URL to fetch
        config: Settings, loaded from the config file when omitted
        **options: FetchOptions fields

    Returns:
        Decoded body, or None for empty or non 2xx/3xx terminal responses
    """
    async with FetchEngine(config=config) as engine:
        return await engine.fetch(url, **options)
