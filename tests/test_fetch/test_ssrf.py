"""Tests for private-address detection and the pre-request SSRF check."""

import socket
from unittest.mock import AsyncMock, patch

import pytest

from brain_enricher.exceptions import FetchError, SsrfBlockedError
from brain_enricher.fetch.ssrf import check_ssrf, is_private_address


@pytest.mark.parametrize(
    "address",
    [
        "10.0.0.1",
        "10.255.255.255",
        "172.16.0.1",
        "172.31.255.254",
        "192.168.1.1",
        "127.0.0.1",
        "127.8.8.8",
        "169.254.169.254",
        "0.0.0.0",
        "::1",
        "fe80::1",
        "fe80::1%eth0",
        "fc00::1",
        "fd12:3456:789a::1",
        "::ffff:10.0.0.1",
        "::ffff:127.0.0.1",
        "::ffff:169.254.169.254",
    ],
)
def test_private_addresses_blocked(address):
    assert is_private_address(address) is True


@pytest.mark.parametrize(
    "address",
    [
        "8.8.8.8",
        "93.184.216.34",
        "172.15.255.255",
        "172.32.0.1",
        "192.169.0.1",
        "2606:4700:4700::1111",
        "::ffff:8.8.8.8",
    ],
)
def test_public_addresses_allowed(address):
    assert is_private_address(address) is False


def test_non_ip_string_is_not_private():
    assert is_private_address("example.com") is False


@pytest.mark.asyncio
async def test_metadata_ip_literal_blocked_without_dns():
    """Cloud metadata endpoint is rejected from the literal, no DNS lookup."""
    mock_resolve = AsyncMock()
    with patch("brain_enricher.fetch.ssrf.resolve_host", mock_resolve):
        with pytest.raises(SsrfBlockedError) as exc_info:
            await check_ssrf("http://169.254.169.254/latest/meta-data/")

    mock_resolve.assert_not_awaited()
    assert exc_info.value.address == "169.254.169.254"
    assert "SSRF blocked" in str(exc_info.value)


@pytest.mark.asyncio
async def test_ipv6_loopback_literal_blocked():
    with pytest.raises(SsrfBlockedError):
        await check_ssrf("http://[::1]:8080/admin")


@pytest.mark.asyncio
async def test_hostname_resolving_to_private_address_blocked():
    with patch(
        "brain_enricher.fetch.ssrf.resolve_host",
        new=AsyncMock(return_value=["93.184.216.34", "10.1.2.3"]),
    ):
        with pytest.raises(SsrfBlockedError) as exc_info:
            await check_ssrf("https://internal.example.com/")

    assert exc_info.value.hostname == "internal.example.com"
    assert exc_info.value.address == "10.1.2.3"


@pytest.mark.asyncio
async def test_hostname_resolving_to_public_address_allowed(public_dns):
    await check_ssrf("https://example.com/article")
    public_dns.assert_awaited_once_with("example.com")


@pytest.mark.asyncio
async def test_dns_failure_is_not_a_block():
    with patch(
        "brain_enricher.fetch.ssrf.resolve_host",
        new=AsyncMock(side_effect=socket.gaierror("Name or service not known")),
    ):
        await check_ssrf("https://does-not-exist.invalid/")


@pytest.mark.asyncio
async def test_url_without_host_raises_fetch_error():
    with pytest.raises(FetchError):
        await check_ssrf("file:///etc/passwd")


def test_ssrf_blocked_is_a_fetch_error():
    assert issubclass(SsrfBlockedError, FetchError)
