"""SSRF guard for page fetching.

URL validation, a DNS pre-check and a post-redirect recheck keep the
fetcher away from loopback, private and link-local networks.  DNS may still
change between the check and httpx's own connection; a local research tool
accepts that gap.
"""

import asyncio
import ipaddress
import socket
from typing import Awaitable, Callable, List, Optional
from urllib.parse import urlsplit

from scout.utils.logger import get_logger
from scout.utils.urls import redact_url_credentials

log = get_logger(__name__)

DNS_LOOKUP_TIMEOUT = 5.0

BLOCKED_SUFFIXES = (".localhost", ".local", ".internal", ".arpa")
CGN_NETWORK = ipaddress.ip_network("100.64.0.0/10")

Resolver = Callable[[str, int], Awaitable[List[str]]]


class UnsafeUrlError(ValueError):
    """The URL is not HTTP(S) or points at an internal host."""


class HostResolutionError(OSError):
    """DNS lookup for the URL's host failed or timed out."""


async def resolve_host(host: str, port: int) -> List[str]:
    """Resolve *host* to its IP addresses using the event loop's resolver."""
    loop = asyncio.get_running_loop()
    try:
        infos = await asyncio.wait_for(
            loop.getaddrinfo(host, port, type=socket.SOCK_STREAM),
            timeout=DNS_LOOKUP_TIMEOUT,
        )
    except asyncio.TimeoutError as exc:
        raise HostResolutionError(f"DNS lookup timed out for {host}") from exc
    except UnicodeError as exc:
        raise HostResolutionError(f"invalid hostname {host!r}: {exc}") from exc
    except OSError as exc:
        raise HostResolutionError(f"DNS lookup failed for {host}: {exc}") from exc
    return [info[4][0] for info in infos]


def is_private_ip(value: str) -> bool:
    """True for loopback, private, link-local, CGN, unspecified and similar."""
    try:
        ip = ipaddress.ip_address(value.split("%", 1)[0])
    except ValueError:
        return False
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    if isinstance(ip, ipaddress.IPv4Address) and ip in CGN_NETWORK:
        return True
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_unspecified
        or ip.is_reserved
        or ip.is_multicast
    )


def is_blocked_host(host: str) -> bool:
    host = host.lower().strip("[]")
    if not host:
        return True
    if host == "localhost" or host.endswith(BLOCKED_SUFFIXES):
        return True
    return is_private_ip(host)


def validate_url(url: str):
    """Synchronous checks: scheme and literal host.  Returns the split URL."""
    try:
        parts = urlsplit(url)
        _ = parts.port  # raises on a malformed port
    except ValueError as exc:
        raise UnsafeUrlError(f"invalid URL: {exc}") from exc
    if parts.scheme.lower() not in ("http", "https"):
        raise UnsafeUrlError("invalid URL: must be HTTP(S)")
    if not parts.hostname or is_blocked_host(parts.hostname):
        raise UnsafeUrlError("blocked: internal/private host not allowed")
    try:
        parts.hostname.encode("idna")
    except UnicodeError as exc:
        # Empty labels ("a..b") or labels over 63 chars.
        raise UnsafeUrlError(f"invalid URL: bad hostname ({exc})") from exc
    return parts


async def check_url(url: str, resolver: Optional[Resolver] = None) -> None:
    """Raise ``UnsafeUrlError`` if *url* (or what it resolves to) is internal."""
    try:
        parts = validate_url(url)
    except UnsafeUrlError:
        log.warning("Blocked fetch of %s", redact_url_credentials(url))
        raise

    host = parts.hostname or ""
    try:
        ipaddress.ip_address(host)
        return  # literal IPs were already checked
    except ValueError:
        pass

    port = parts.port or (443 if parts.scheme.lower() == "https" else 80)
    addresses = await (resolver or resolve_host)(host, port)
    for address in addresses:
        if is_private_ip(address):
            log.warning("DNS for %s resolves to private address %s", host, address)
            raise UnsafeUrlError("blocked: internal/private host not allowed")
