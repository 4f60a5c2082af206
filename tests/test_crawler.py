import asyncio

import httpx
import pytest

from mensa_menu.crawler import AsyncCrawler, _sanitize_url


def run(coro_factory, handler):
    async def runner():
        async with AsyncCrawler(user_agent="TestAgent/1.0", transport=httpx.MockTransport(handler)) as crawler:
            return await coro_factory(crawler)

    return asyncio.run(runner())


def test_post_returns_decoded_text_and_sends_headers():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["user_agent"] = request.headers["User-Agent"]
        captured["params"] = dict(request.url.params)
        return httpx.Response(200, text="<h4>Menü</h4>", headers={"content-type": "text/html; charset=utf-8"})

    result = run(lambda crawler: crawler.post("https://example.com/forum/", {"day": "1"}), handler)

    assert captured == {"method": "POST", "user_agent": "TestAgent/1.0", "params": {"day": "1"}}
    assert result.ok
    assert result.text == "<h4>Menü</h4>"
    assert result.status_code == 200


def test_transport_errors_are_reported_not_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    result = run(lambda crawler: crawler.post("https://example.com/forum/"), handler)

    assert not result.ok
    assert result.status_code is None
    assert "no route" in (result.error or "")


def test_error_status_is_not_ok():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="oops")

    result = run(lambda crawler: crawler.post("https://example.com/forum/"), handler)

    assert result.error is None
    assert not result.ok


def test_get_bytes_keeps_raw_content():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})

    result = run(lambda crawler: crawler.get_bytes("https://example.com/a.png"), handler)

    assert result.content == b"\x89PNG"
    assert result.text is None


def test_concurrency_must_be_positive():
    with pytest.raises(ValueError):
        AsyncCrawler(concurrency=0)


def test_sanitize_url():
    assert _sanitize_url(" https://example.com/a b\n") == "https://example.com/a%20b"
