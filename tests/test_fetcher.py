from __future__ import annotations

import asyncio

import httpx
import pytest

from errors import FetchError, FetchErrorKind
from fetcher import fetch_raw, validate_url


def fetch_with(handler, url="https://novel.test/c1"):
    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_raw(url, client=client)
    return asyncio.run(scenario())


def test_fetch_returns_utf8_text_and_sends_user_agent():
    seen = {}

    def handler(request):
        seen["ua"] = request.headers["User-Agent"]
        return httpx.Response(200, content="<p>Chương 1 – café</p>".encode("utf-8"))

    assert fetch_with(handler) == "<p>Chương 1 – café</p>"
    assert "Mobile" in seen["ua"]


def test_fetch_bad_status():
    with pytest.raises(FetchError) as info:
        fetch_with(lambda request: httpx.Response(403, text="blocked"))
    assert info.value.kind is FetchErrorKind.BAD_STATUS
    assert info.value.status_code == 403
    assert "403" in str(info.value)


def test_fetch_transport_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(FetchError) as info:
        fetch_with(handler)
    assert info.value.kind is FetchErrorKind.TRANSPORT


def test_fetch_decode_failure():
    with pytest.raises(FetchError) as info:
        fetch_with(lambda request: httpx.Response(200, content=b"\xff\xfe\xfa bad"))
    assert info.value.kind is FetchErrorKind.DECODE_FAILURE


@pytest.mark.parametrize("url", ["", "not a url", "ftp://novel.test/c1", "https://", "/relative/path"])
def test_invalid_urls(url):
    with pytest.raises(FetchError) as info:
        validate_url(url)
    assert info.value.kind is FetchErrorKind.INVALID_URL


def test_invalid_url_checked_before_any_request():
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(FetchError) as info:
        fetch_with(handler, url="javascript:alert(1)")
    assert info.value.kind is FetchErrorKind.INVALID_URL
