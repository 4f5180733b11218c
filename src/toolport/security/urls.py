"""
Outbound URL filtering.

Guards the fetch tools against requests to local files, loopback,
link-local and private network addresses (server-side request forgery).
Only literal hosts are inspected; names are not resolved here.
"""

import ipaddress
import socket
from urllib.parse import urlsplit

ALLOWED_SCHEMES = ("http", "https")

BLOCKED_HOSTNAMES = ("localhost",)

BLOCKED_NETWORKS = tuple(
    ipaddress.ip_network(net)
    for net in (
        "0.0.0.0/32",
        "10.0.0.0/8",
        "127.0.0.0/8",
        "169.254.0.0/16",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "::/128",
        "::1/128",
        "fe80::/10",
    )
)


def _parse_ip(host: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        # Legacy IPv4 spellings resolvers still accept: 127.1, 0x7f.0.0.1, 2130706433
        try:
            return ipaddress.IPv4Address(socket.inet_aton(host))
        except OSError:
            return None

    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return address.ipv4_mapped
    return address


def is_blocked_host(host: str) -> bool:
    """Check a bare host name or IP literal against the blocklist."""
    host = host.strip().rstrip(".").lower()
    if not host:
        return True

    if host in BLOCKED_HOSTNAMES or any(host.endswith(f".{name}") for name in BLOCKED_HOSTNAMES):
        return True

    address = _parse_ip(host)
    if address is None:
        return False
    return any(address in network for network in BLOCKED_NETWORKS)


def is_url_safe(url: str) -> bool:
    """
    Check whether a URL may be fetched.

    Returns False when the URL does not parse, uses a scheme other than
    http/https (``file:`` in particular), has no host, or names a
    loopback, link-local, private or unspecified address.

    Args:
        url: URL supplied by the caller

    Returns:
        True if the URL is safe to request
    """
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
        # Accessing port validates it
        parts.port
    except (ValueError, AttributeError):
        return False

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return False
    if not host:
        return False

    return not is_blocked_host(host)
