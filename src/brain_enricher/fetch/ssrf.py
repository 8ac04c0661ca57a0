"""Private-address detection for outbound requests.

Resolution here is inherently TOCTOU: the hostname may resolve differently
when the HTTP client connects a moment later. That residual risk is accepted;
pinning the connection to the checked address is not done.
"""

import asyncio
import ipaddress
import logging
import socket
from urllib.parse import urlsplit

from brain_enricher.exceptions import FetchError, SsrfBlockedError

logger = logging.getLogger(__name__)

BLOCKED_NETWORKS = tuple(
    ipaddress.ip_network(cidr)
    for cidr in (
        "0.0.0.0/8",
        "10.0.0.0/8",
        "127.0.0.0/8",
        "169.254.0.0/16",  # link-local, cloud metadata
        "172.16.0.0/12",
        "192.168.0.0/16",
        "::/128",
        "::1/128",
        "fc00::/7",
        "fe80::/10",
    )
)


def is_private_address(address: str) -> bool:
    """Return True if an IP address string falls in a blocked range.

    IPv4-mapped IPv6 addresses (``::ffff:10.0.0.1``) are checked as IPv4.
    Strings that are not IP addresses return False.
    """
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return False

    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped

    return any(ip.version == net.version and ip in net for net in BLOCKED_NETWORKS)


async def resolve_host(hostname: str) -> list[str]:
    """Resolve a hostname to every IPv4/IPv6 address it maps to."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    return sorted({info[4][0] for info in infos})


async def check_ssrf(url: str) -> None:
    """Raise SsrfBlockedError if the URL's host is or resolves to a private address.

    DNS failures are not treated as a block: the request itself will fail
    with a network error and surface as a FetchError.
    """
    hostname = urlsplit(url).hostname
    if not hostname:
        raise FetchError(f"URL has no hostname: {url}", url=url)

    try:
        ipaddress.ip_address(hostname.split("%", 1)[0])
    except ValueError:
        pass  # Not an IP literal -- resolve it
    else:
        if is_private_address(hostname):
            raise SsrfBlockedError(url, hostname, hostname)
        return

    try:
        addresses = await resolve_host(hostname)
    except (socket.gaierror, UnicodeError) as exc:
        logger.debug("DNS resolution failed for %s: %s", hostname, exc)
        return

    for address in addresses:
        if is_private_address(address):
            raise SsrfBlockedError(url, hostname, address)
