"""Shared fixtures for the tutorscout test suite."""

import asyncio
import socket
import threading
from collections import Counter
from collections.abc import Generator
from contextlib import closing
from pathlib import Path

import pytest
from aiohttp import web

from tests.mock_server import HITS, create_app
from tutorscout.config import CrawlConfig

# =============================================================================
# aiohttp test server fixtures
# =============================================================================


def find_free_port() -> int:
    """Find a free port on localhost.

    Returns:
        An available port number.
    """
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class AioHttpTestServer:
    """Wrapper to run aiohttp server in a background thread."""

    def __init__(self, app: web.Application, port: int) -> None:
        self.app = app
        self.port = port
        self.host = "127.0.0.1"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.host}:{self.port}"

    @property
    def hits(self) -> Counter:
        """Requests served so far, keyed by path and query string."""
        return self.app[HITS]

    def start(self) -> None:
        """Start the server in a background thread."""
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        if not self._started.wait(timeout=5.0):
            raise RuntimeError("mock server did not start")

    def _run_server(self) -> None:
        """Run the server in an asyncio event loop."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        async def start() -> None:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.port)
            await site.start()

        self._loop.run_until_complete(start())
        self._started.set()
        self._loop.run_forever()

    def stop(self) -> None:
        """Stop the server and clean up resources."""
        if self._loop and self._runner:
            future = asyncio.run_coroutine_threadsafe(
                self._runner.cleanup(), self._loop
            )
            try:
                future.result(timeout=2.0)
            except Exception:
                pass  # Best effort cleanup

        if self._loop:
            self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread:
            self._thread.join(timeout=2.0)


@pytest.fixture
def tutor_site() -> Generator[AioHttpTestServer, None, None]:
    """Create and start an aiohttp server running the mock tutor directory.

    Yields:
        AioHttpTestServer instance with the tutor site running.
    """
    app = create_app()
    port = find_free_port()
    server = AioHttpTestServer(app, port)
    server.start()
    yield server
    server.stop()


@pytest.fixture
def server_url(tutor_site: AioHttpTestServer) -> str:
    """Get the base URL of the test server.

    Returns:
        The base URL string (e.g., "http://127.0.0.1:8080").
    """
    return tutor_site.url


# =============================================================================
# Crawl configuration
# =============================================================================


@pytest.fixture
def crawl_config(server_url: str, tmp_path: Path) -> CrawlConfig:
    """A configuration pointed at the mock site with no throttling.

    Two locations and two subjects, zero delay and backoff, and the circuit
    breaker disabled so that failure counts are deterministic.
    """
    return CrawlConfig(
        base_url=server_url,
        locations=("melbourne", "sydney"),
        subjects=("physics", "maths-methods"),
        cache_dir=tmp_path / "html_cache",
        output_path=tmp_path / "tutor_data.csv",
        request_delay=0.0,
        backoff_base=0.0,
        breaker_threshold=0,
    )

