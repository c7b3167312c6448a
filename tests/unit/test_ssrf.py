"""Unit tests for the SSRF guard."""

import pytest

from scout.security.ssrf import (
    HostResolutionError,
    UnsafeUrlError,
    check_url,
    is_blocked_host,
    is_private_ip,
    resolve_host,
    validate_url,
)


@pytest.mark.parametrize(
    "ip",
    ["127.0.0.1", "10.1.2.3", "192.168.0.1", "172.16.5.5", "169.254.169.254",
     "100.64.0.1", "0.0.0.0", "::1", "fe80::1", "::ffff:127.0.0.1", "fd00::1"],
)
def test_private_ips(ip):
    assert is_private_ip(ip)


@pytest.mark.parametrize("ip", ["93.184.216.34", "8.8.8.8", "2606:4700:4700::1111"])
def test_public_ips(ip):
    assert not is_private_ip(ip)


def test_not_an_ip():
    assert not is_private_ip("example.com")


@pytest.mark.parametrize("host", ["localhost", "printer.local", "db.internal", "x.localhost", ""])
def test_blocked_hostnames(host):
    assert is_blocked_host(host)


def test_public_hostname_allowed():
    assert not is_blocked_host("tokio.rs")


@pytest.mark.parametrize(
    "url",
    ["ftp://example.com/file", "file:///etc/passwd", "http://127.0.0.1/admin",
     "http://[::1]/", "https://localhost:8080/", "http:///nohost", "https://example.com:bad/",
     "https://a..example.com/", "https://" + "a" * 64 + ".example.com/"],
)
def test_validate_rejects(url):
    with pytest.raises(UnsafeUrlError):
        validate_url(url)


def test_validate_accepts_public():
    parts = validate_url("https://tokio.rs/tokio/tutorial")
    assert parts.hostname == "tokio.rs"


@pytest.mark.asyncio
async def test_check_url_resolves_public(public_resolver):
    await check_url("https://tokio.rs/", public_resolver)
    assert public_resolver.calls == [("tokio.rs", 443)]


@pytest.mark.asyncio
async def test_check_url_rejects_private_resolution():
    async def resolver(host, port):
        return ["93.184.216.34", "10.0.0.7"]

    with pytest.raises(UnsafeUrlError):
        await check_url("http://rebind.example.com/", resolver)


@pytest.mark.asyncio
async def test_literal_public_ip_skips_dns():
    async def resolver(host, port):
        raise AssertionError("DNS should not be consulted")

    await check_url("http://93.184.216.34/", resolver)


@pytest.mark.asyncio
async def test_resolution_error_propagates():
    async def resolver(host, port):
        raise HostResolutionError("DNS lookup failed for nx.example")

    with pytest.raises(HostResolutionError):
        await check_url("https://nx.example/", resolver)


@pytest.mark.asyncio
async def test_unencodable_hostname_is_resolution_error():
    # The IDNA codec rejects the empty label before any lookup is sent.
    with pytest.raises(HostResolutionError):
        await resolve_host("a..example.com", 443)
