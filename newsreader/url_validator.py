"""
URL Validator - Reject feed URLs the reader must never fetch.

Every feed URL is checked before any network activity:
- Only absolute http/https URLs with a hostname are accepted
- Optionally, hosts on loopback, private, link-local or cloud metadata
  addresses are refused so a hostile subscription cannot reach the
  internal network
"""

import ipaddress
import socket
from urllib.parse import urlparse


class InvalidUrlError(ValueError):
    """Raised when a URL fails validation."""

    pass


# Blocked IP ranges (private, loopback, link-local, metadata)
BLOCKED_IP_RANGES = [
    # IPv4 private ranges
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    # Loopback
    ipaddress.ip_network("127.0.0.0/8"),
    # Link-local
    ipaddress.ip_network("169.254.0.0/16"),
    # Reserved
    ipaddress.ip_network("0.0.0.0/8"),
    # Broadcast
    ipaddress.ip_network("255.255.255.255/32"),
    # IPv6 equivalents
    ipaddress.ip_network("::1/128"),  # Loopback
    ipaddress.ip_network("fc00::/7"),  # Unique local
    ipaddress.ip_network("fe80::/10"),  # Link-local
]

# Blocked hostnames
BLOCKED_HOSTNAMES = {
    "localhost",
    "localhost.localdomain",
    "ip6-localhost",
    "ip6-loopback",
    "metadata",
    "metadata.google.internal",
}

# Allowed URL schemes
ALLOWED_SCHEMES = {"http", "https"}


def is_ip_blocked(ip_str: str) -> bool:
    """Check if an IP address is in a blocked range."""
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return False
    return any(ip in network for network in BLOCKED_IP_RANGES)


def is_http_url(url: str | None) -> bool:
    """Return True for an absolute http(s) URL with a hostname."""
    if not url:
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme.lower() in ALLOWED_SCHEMES and bool(parsed.hostname)


def validate_url(
    url: str,
    block_private: bool = True,
    resolve_dns: bool = True
) -> str:
    """
    Validate a feed URL.

    Args:
        url: The URL to validate
        block_private: Refuse loopback/private/metadata hosts
        resolve_dns: Whether to resolve DNS and check the resolved addresses
            (only used when block_private is set)

    Returns:
        The validated URL, stripped of surrounding whitespace

    Raises:
        InvalidUrlError: If the URL fails validation
    """
    url = (url or "").strip()
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InvalidUrlError(f"Invalid URL format: {e}")

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidUrlError(
            f"URL scheme '{parsed.scheme}' is not allowed. Use http or https."
        )

    try:
        hostname = parsed.hostname
        port = parsed.port
    except ValueError as e:
        raise InvalidUrlError(f"Invalid URL format: {e}")

    if not hostname:
        raise InvalidUrlError("URL must include a hostname")

    if not block_private:
        return url

    hostname = hostname.lower()

    if hostname in BLOCKED_HOSTNAMES:
        raise InvalidUrlError(f"Access to '{hostname}' is not allowed")

    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        ip = None

    if ip is not None:
        if is_ip_blocked(str(ip)):
            raise InvalidUrlError(f"Access to IP address '{ip}' is not allowed")
    else:
        # Not an IP address, it's a hostname - check for blocked patterns
        for suffix in (".local", ".internal", ".localhost"):
            if hostname.endswith(suffix):
                raise InvalidUrlError(f"Access to {suffix} domains is not allowed")

    if resolve_dns:
        try:
            addrinfo = socket.getaddrinfo(
                hostname, port or 80, proto=socket.IPPROTO_TCP
            )
        except (socket.gaierror, UnicodeError):
            # DNS resolution failed - this will fail at fetch time anyway
            return url
        for _family, _, _, _, sockaddr in addrinfo:
            ip_str = sockaddr[0]
            if is_ip_blocked(ip_str):
                raise InvalidUrlError(
                    f"Hostname '{hostname}' resolves to blocked IP address '{ip_str}'"
                )

    return url
