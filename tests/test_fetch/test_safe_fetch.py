"""Tests for SafeFetcher: SSRF per hop, size cap, timeouts, error mapping."""

from types import SimpleNamespace

import httpx
import pytest
import respx

from brain_enricher.config import Settings
from brain_enricher.exceptions import (
    FetchError,
    FetchTimeoutError,
    ResponseTooLargeError,
    SsrfBlockedError,
)
from brain_enricher.fetch import SafeFetcher
from brain_enricher.fetch.safe_fetch import _read_limited


@pytest.mark.asyncio
async def test_fetch_success_returns_read_body(fetcher):
    with respx.mock(assert_all_called=False) as mock:
        route = mock.get("https://example.com/page").mock(
            return_value=httpx.Response(200, text="<html>hello</html>")
        )
        response, text = await fetcher.fetch_text("https://example.com/page")

    assert response.status_code == 200
    assert text == "<html>hello</html>"
    assert route.calls.last.request.headers["User-Agent"] == fetcher.user_agent


@pytest.mark.asyncio
async def test_non_2xx_is_returned_not_raised(fetcher):
    with respx.mock() as mock:
        mock.get("https://example.com/missing").mock(return_value=httpx.Response(404, text="nope"))
        response = await fetcher.fetch("https://example.com/missing")

    assert response.status_code == 404
    assert response.is_success is False


@pytest.mark.asyncio
async def test_private_ip_blocked_before_any_request(fetcher):
    with respx.mock(assert_all_called=False) as mock:
        route = mock.get("http://10.0.0.5/admin").mock(return_value=httpx.Response(200))
        with pytest.raises(SsrfBlockedError):
            await fetcher.fetch("http://10.0.0.5/admin")

    assert not route.called


@pytest.mark.asyncio
async def test_metadata_endpoint_blocked(fetcher):
    with respx.mock(assert_all_called=False) as mock:
        route = mock.get("http://169.254.169.254/latest/meta-data/").mock(
            return_value=httpx.Response(200)
        )
        with pytest.raises(SsrfBlockedError):
            await fetcher.fetch("http://169.254.169.254/latest/meta-data/")

    assert not route.called


@pytest.mark.asyncio
async def test_skip_ssrf_check_allows_private_target(fetcher):
    with respx.mock() as mock:
        mock.get("http://10.0.0.5/ok").mock(return_value=httpx.Response(200, text="ok"))
        response = await fetcher.fetch("http://10.0.0.5/ok", skip_ssrf_check=True)

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_declared_content_length_over_cap_rejected(fetcher):
    with respx.mock() as mock:
        mock.get("https://example.com/big").mock(
            return_value=httpx.Response(200, content=b"x" * 2048)
        )
        with pytest.raises(ResponseTooLargeError) as exc_info:
            await fetcher.fetch("https://example.com/big", max_body_bytes=1024)

    assert exc_info.value.size == 2048
    assert exc_info.value.limit == 1024


@pytest.mark.asyncio
async def test_chunked_body_over_cap_rejected(fetcher):
    async def body():
        for _ in range(10):
            yield b"y" * 1024

    with respx.mock() as mock:
        mock.get("https://example.com/stream").mock(
            return_value=httpx.Response(200, content=body())
        )
        with pytest.raises(ResponseTooLargeError):
            await fetcher.fetch("https://example.com/stream", max_body_bytes=4096)


@pytest.mark.asyncio
async def test_read_limited_stops_at_first_chunk_over_cap():
    """The stream is abandoned as soon as the running total passes the cap."""
    produced = 0

    async def chunks():
        nonlocal produced
        for _ in range(100):
            produced += 1
            yield b"y" * 1024

    response = SimpleNamespace(headers={}, aiter_bytes=chunks)
    with pytest.raises(ResponseTooLargeError):
        await _read_limited(response, 4096, "https://example.com/stream")

    assert produced == 5


@pytest.mark.asyncio
async def test_body_within_cap_is_accepted(fetcher):
    with respx.mock() as mock:
        mock.get("https://example.com/exact").mock(
            return_value=httpx.Response(200, content=b"z" * 1024)
        )
        response = await fetcher.fetch("https://example.com/exact", max_body_bytes=1024)

    assert len(response.content) == 1024


@pytest.mark.asyncio
async def test_redirect_followed_and_final_url_kept(fetcher):
    with respx.mock() as mock:
        mock.get("https://example.com/old").mock(
            return_value=httpx.Response(301, headers={"Location": "/new"})
        )
        mock.get("https://example.com/new").mock(return_value=httpx.Response(200, text="moved"))
        response, text = await fetcher.fetch_text("https://example.com/old")

    assert text == "moved"
    assert str(response.url) == "https://example.com/new"


@pytest.mark.asyncio
async def test_redirect_into_private_range_blocked(fetcher):
    with respx.mock(assert_all_called=False) as mock:
        mock.get("https://example.com/go").mock(
            return_value=httpx.Response(302, headers={"Location": "http://127.0.0.1/admin"})
        )
        internal = mock.get("http://127.0.0.1/admin").mock(return_value=httpx.Response(200))
        with pytest.raises(SsrfBlockedError):
            await fetcher.fetch("https://example.com/go")

    assert not internal.called


@pytest.mark.asyncio
async def test_too_many_redirects(public_dns):
    fetcher = SafeFetcher(max_redirects=2)
    with respx.mock() as mock:
        route = mock.get("https://example.com/loop").mock(
            return_value=httpx.Response(302, headers={"Location": "https://example.com/loop"})
        )
        with pytest.raises(FetchError, match="Too many redirects"):
            await fetcher.fetch("https://example.com/loop")

    assert route.call_count == 3


@pytest.mark.asyncio
async def test_redirect_to_unsupported_scheme_rejected(fetcher):
    with respx.mock() as mock:
        mock.get("https://example.com/ftp").mock(
            return_value=httpx.Response(302, headers={"Location": "ftp://example.com/file"})
        )
        with pytest.raises(FetchError, match="unsupported scheme"):
            await fetcher.fetch("https://example.com/ftp")


@pytest.mark.asyncio
async def test_transport_timeout_maps_to_fetch_timeout(fetcher):
    with respx.mock() as mock:
        mock.get("https://example.com/slow").mock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(FetchTimeoutError):
            await fetcher.fetch("https://example.com/slow")


@pytest.mark.asyncio
async def test_network_error_maps_to_fetch_error(fetcher):
    with respx.mock() as mock:
        mock.get("https://example.com/down").mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch("https://example.com/down")

    assert not isinstance(exc_info.value, (SsrfBlockedError, FetchTimeoutError))


@pytest.mark.asyncio
async def test_fetch_json_decodes_body(fetcher):
    with respx.mock() as mock:
        mock.get("https://api.example.com/items").mock(
            return_value=httpx.Response(200, json={"items": [1, 2]})
        )
        response, data = await fetcher.fetch_json(
            "https://api.example.com/items", params={"page": "1"}
        )

    assert data == {"items": [1, 2]}
    assert response.url.params["page"] == "1"


@pytest.mark.asyncio
async def test_fetch_json_invalid_body_raises(fetcher):
    with respx.mock() as mock:
        mock.get("https://api.example.com/broken").mock(
            return_value=httpx.Response(200, text="<html>not json</html>")
        )
        with pytest.raises(FetchError, match="Invalid JSON"):
            await fetcher.fetch_json("https://api.example.com/broken")


def test_from_settings_copies_limits():
    settings = Settings(
        _env_file=None,
        fetch_timeout_seconds=7,
        fetch_max_body_bytes=1000,
        fetch_max_redirects=1,
        fetch_user_agent="TestAgent/1.0",
    )
    fetcher = SafeFetcher.from_settings(settings)

    assert fetcher.timeout == 7
    assert fetcher.max_body_bytes == 1000
    assert fetcher.max_redirects == 1
    assert fetcher.user_agent == "TestAgent/1.0"
