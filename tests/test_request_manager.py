"""Tests for AsyncRequestManager against the mock tutor site.

A single GET either returns the body or raises a transient exception; the
request manager itself never retries.
"""

import pytest

from tutorscout.common.exceptions import (
    HTMLResponseAssumptionException,
    RequestTimeoutException,
    TransientException,
)
from tutorscout.common.request_manager import AsyncRequestManager


async def test_get_returns_body(tutor_site):
    async with AsyncRequestManager() as manager:
        body = await manager.get(f"{tutor_site.url}/tutor/t1")

    assert "Alice Nguyen" in body
    assert tutor_site.hits["/tutor/t1"] == 1


async def test_server_error_is_transient(tutor_site):
    url = f"{tutor_site.url}/tutor/t5"
    async with AsyncRequestManager() as manager:
        with pytest.raises(HTMLResponseAssumptionException) as exc_info:
            await manager.get(url)

    assert isinstance(exc_info.value, TransientException)
    assert exc_info.value.status_code == 500
    assert exc_info.value.url == url
    assert tutor_site.hits["/tutor/t5"] == 1


async def test_not_found_is_transient(tutor_site):
    async with AsyncRequestManager() as manager:
        with pytest.raises(HTMLResponseAssumptionException) as exc_info:
            await manager.get(f"{tutor_site.url}/tutor/nobody")

    assert exc_info.value.status_code == 404


async def test_timeout_raises_request_timeout(tutor_site):
    async with AsyncRequestManager(timeout=0.1) as manager:
        with pytest.raises(RequestTimeoutException) as exc_info:
            await manager.get(f"{tutor_site.url}/slow")

    assert exc_info.value.timeout_seconds == 0.1


async def test_default_and_custom_headers():
    async with AsyncRequestManager() as manager:
        assert "Mozilla" in manager._client.headers["User-Agent"]

    async with AsyncRequestManager(
        headers={"User-Agent": "tutorscout-test"}
    ) as manager:
        assert manager._client.headers["User-Agent"] == "tutorscout-test"
