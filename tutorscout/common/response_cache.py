"""Disk-backed response cache keyed by request URL.

Each cached URL is stored as one file whose name is the URL-safe base64
encoding of the URL (unpadded) plus ``.html``. URLs whose encoding would
exceed ``MAX_ENCODED_LENGTH`` characters are stored under the SHA-256 hex
digest of the URL plus ``.sha256.html`` instead, keeping every name well
inside the 255-byte limit of common filesystems. The cache is append-only: an
entry is written on the first successful fetch and read forever after. There
is no expiry; use :meth:`ResponseCache.clear` (or delete the directory) to
force fresh downloads.
"""

from __future__ import annotations

import asyncio
import base64
import hashlib
import logging
from pathlib import Path

from tutorscout.common.exceptions import CacheUnavailableError

logger = logging.getLogger(__name__)

CACHE_SUFFIX = ".html"
HASHED_SUFFIX = ".sha256" + CACHE_SUFFIX
MAX_ENCODED_LENGTH = 200


def cache_key(url: str) -> str:
    """Derive the filesystem-safe cache key for *url*.

    The key is deterministic. Short URLs map to their unpadded base64 form,
    which cannot collide; long URLs map to a SHA-256 digest. The two forms
    never overlap because base64 output contains no ``.``.

    Example::

        >>> cache_key("https://example.com/a?b=1")
        'aHR0cHM6Ly9leGFtcGxlLmNvbS9hP2I9MQ.html'
    """
    raw = url.encode("utf-8")
    encoded = base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
    if len(encoded) > MAX_ENCODED_LENGTH:
        return hashlib.sha256(raw).hexdigest() + HASHED_SUFFIX
    return encoded + CACHE_SUFFIX


class ResponseCache:
    """Persistent store of raw HTML bodies, one file per URL.

    File reads and writes run in a worker thread so that cache access is a
    suspension point for the event loop, like network I/O.

    Example::

        cache = ResponseCache(Path("html_cache"))
        cache.ensure_directory()
        await cache.put(url, html)
        assert await cache.get(url) == html
    """

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = Path(cache_dir)

    def ensure_directory(self) -> None:
        """Create the cache directory and verify it is writable.

        Raises:
            CacheUnavailableError: If the directory cannot be created or
                written to.
        """
        marker = self.cache_dir / ".write-check"
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            marker.write_text("", encoding="utf-8")
            marker.unlink()
        except OSError as e:
            raise CacheUnavailableError(str(self.cache_dir)) from e

    def path_for(self, url: str) -> Path:
        """Return the file path that holds (or would hold) *url*'s body."""
        return self.cache_dir / cache_key(url)

    async def get(self, url: str) -> str | None:
        """Return the cached body for *url*, or None on a cache miss."""
        path = self.path_for(url)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None

    async def put(self, url: str, body: str) -> None:
        """Store *body* as the cached response for *url*."""
        path = self.path_for(url)
        await asyncio.to_thread(path.write_text, body, encoding="utf-8")

    def clear(self) -> int:
        """Delete every cached response.

        Returns:
            The number of files removed.
        """
        if not self.cache_dir.is_dir():
            return 0
        removed = 0
        for path in self.cache_dir.glob(f"*{CACHE_SUFFIX}"):
            path.unlink()
            removed += 1
        logger.info(f"Removed {removed} cached responses from {self.cache_dir}")
        return removed
