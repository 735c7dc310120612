"""URL validation for job posting fetches.

Rejects malformed URLs and blocks requests to internal/private network
addresses before the scraper opens a connection.

NOTE: This validation is subject to DNS rebinding (TOCTOU) attacks. The
hostname is resolved here and again by the HTTP client. For full protection,
use a network-level egress filter or proxy in production.
"""

from __future__ import annotations

import ipaddress
import socket
from urllib.parse import urlparse

from gap_tailor.errors import FetchError, InvalidUrl

_BLOCKED_HOSTNAMES = {"localhost", "localhost.localdomain"}

# Cloud metadata and special IPs that may bypass is_private checks
_BLOCKED_IPS = {
    ipaddress.ip_address("169.254.169.254"),  # AWS/GCP/Azure metadata
    ipaddress.ip_address("0.0.0.0"),
}


def _is_blocked(addr: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    return (
        addr in _BLOCKED_IPS
        or addr.is_private
        or addr.is_loopback
        or addr.is_reserved
        or addr.is_link_local
    )


def validate_url(url: str, *, resolve: bool = True) -> str:
    """Validate a job posting URL and return it stripped.

    Raises InvalidUrl if the URL is malformed, uses a scheme other than
    http/https, or targets a private/internal address. With ``resolve``
    the hostname is looked up and every resulting address is checked; a
    failed lookup is a network failure and raises FetchError.
    """
    url = (url or "").strip()
    if not url:
        raise InvalidUrl("No URL provided")

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
        parsed.port  # noqa: B018 - raises ValueError on a malformed port
    except ValueError as exc:
        raise InvalidUrl(f"Invalid URL format: {url!r}") from exc

    if parsed.scheme not in ("http", "https"):
        raise InvalidUrl(f"Unsupported URL scheme: {parsed.scheme!r}")
    if not hostname:
        raise InvalidUrl(f"No hostname in URL: {url!r}")

    # Block known internal hostnames
    if hostname.lower() in _BLOCKED_HOSTNAMES:
        raise InvalidUrl(f"Blocked internal hostname: {hostname!r}")

    # Try to parse as IP literal first
    try:
        addr = ipaddress.ip_address(hostname)
    except ValueError:
        addr = None
    if addr is not None:
        if _is_blocked(addr):
            raise InvalidUrl(f"Blocked private/internal IP: {addr}")
        return url

    if not resolve:
        return url

    # Resolve hostname and check all resulting IPs
    try:
        results = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as exc:
        raise FetchError(f"Cannot resolve hostname {hostname!r}: {exc}") from exc

    for _family, _type, _proto, _canonname, sockaddr in results:
        addr = ipaddress.ip_address(sockaddr[0])
        if _is_blocked(addr):
            raise InvalidUrl(f"Hostname {hostname!r} resolves to blocked address: {addr}")

    return url
