"""
Shared fixtures: a local aiohttp server that records what it receives
"""

from dataclasses import dataclass, field

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from multidict import CIMultiDict

from hopfetch.config import Config
from hopfetch.core import FetchEngine, StreamingDownloader


@dataclass
class SeenRequest:
    method: str
    path: str
    headers: CIMultiDict
    body: bytes = b""


@dataclass
class MockSite:
    server: TestServer
    requests: list[SeenRequest] = field(default_factory=list)

    def url(self, path: str) -> str:
        return str(self.server.make_url(path))

    @property
    def origin(self) -> str:
        return f"http://{self.server.host}:{self.server.port}"

    @property
    def paths(self) -> list[str]:
        return [r.path for r in self.requests]


@pytest.fixture
def config(tmp_path):
    return Config(download_dir=str(tmp_path / "downloads"), progress_interval=0)


@pytest.fixture
async def site():
    """Call with a list of aiohttp routes to start a server"""
    started = []

    async def _start(routes) -> MockSite:
        seen: list[SeenRequest] = []

        @web.middleware
        async def record(request, handler):
            seen.append(SeenRequest(
                method=request.method,
                path=request.path_qs,
                headers=CIMultiDict(request.headers),
                body=await request.read(),
            ))
            return await handler(request)

        app = web.Application(middlewares=[record])
        app.router.add_routes(routes)
        server = TestServer(app)
        await server.start_server()
        started.append(server)
        return MockSite(server=server, requests=seen)

    yield _start

    for server in started:
        await server.close()


@pytest.fixture
async def engine(config):
    async with FetchEngine(config=config) as engine:
        yield engine


@pytest.fixture
async def downloader(config):
    async with StreamingDownloader(config=config) as dl:
        yield dl
