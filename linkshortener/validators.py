"""URL predicates and normalization used by the shortening service.

Functions:
    enforce_https(url: str) -> str
        Prepend 'https://' to URLs without a scheme.
    is_valid_url(url: str) -> bool
        Syntactic check for absolute http(s) URLs.
    is_blocked_domain(url: str, domain: str) -> bool
        True when url points at the shortener's own domain.
    is_valid_custom_code(code: str) -> bool
        True when code is usable as a path segment shortcode.

All predicates are pure and never raise on bad input.

Example:
    >>> enforce_https('example.com/page')
    'https://example.com/page'
    >>> is_valid_url('https://example.com/page')
    True
    >>> is_blocked_domain('https://www.myshortener.com/abc', 'myshortener.com')
    True
"""

import ipaddress
import re
from urllib.parse import urlsplit

from linkshortener.constants import Shortcode


MAX_URL_LENGTH = 2048

_SCHEME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9+.-]*://')
_LABEL_RE = re.compile(r'^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$')
_TLD_RE = re.compile(r'^[A-Za-z]{2,63}$|^xn--[A-Za-z0-9-]{1,59}$')
_CUSTOM_CODE_RE = re.compile(Shortcode.CUSTOM_PATTERN)
_DEFAULT_PORTS = {'http': 80, 'https': 443}


def enforce_https(url: str) -> str:
    """Return url with 'https://' prepended when it carries no scheme.

    Explicit schemes (including 'http://') are kept as they are. This is a
    normalization policy, not a security upgrade.
    """
    url = url.strip()
    if _SCHEME_RE.match(url):
        return url
    return f'https://{url.lstrip("/")}'


def _ascii_hostname(hostname: str) -> str | None:
    """IDNA-encode internationalized labels ('例え.jp' -> 'xn--r8jz45g.jp'); None if not encodable"""
    try:
        return hostname.encode('idna').decode('ascii')
    except UnicodeError:
        return None


def _valid_hostname(hostname: str) -> bool:
    if hostname == 'localhost':
        return True
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        pass
    else:
        return True

    hostname = _ascii_hostname(hostname)
    if hostname is None:
        return False

    labels = hostname.rstrip('.').split('.')
    if len(labels) < 2:
        return False
    return all(_LABEL_RE.match(label) for label in labels) and bool(_TLD_RE.match(labels[-1]))


def is_valid_url(url: str) -> bool:
    """Check that url is an absolute http(s) URL with a plausible host."""
    if not url or not isinstance(url, str) or len(url) > MAX_URL_LENGTH:
        return False
    if any(c.isspace() for c in url):
        return False

    try:
        parts = urlsplit(url)
        hostname = parts.hostname
        _ = parts.port  # raises ValueError on out-of-range or non-numeric ports
    except ValueError:
        return False

    if parts.scheme.lower() not in _DEFAULT_PORTS or not hostname:
        return False
    return _valid_hostname(hostname)


def _host_key(netloc_host: str | None, port: int | None, scheme: str) -> str:
    host = (netloc_host or '').lower().rstrip('.')
    host = _ascii_hostname(host) or host
    host = host.removeprefix('www.')
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        return f'{host}:{port}'
    return host


def is_blocked_domain(url: str, domain: str) -> bool:
    """Return True when url targets the shortener's own domain.

    Hosts are compared case-insensitively, ignoring a leading 'www.' and
    default ports, so shortening a short link into a self-referential loop
    is refused. `domain` may carry a port, e.g. 'localhost:3000'.
    """
    if not url or not domain:
        return False

    try:
        target = urlsplit(enforce_https(url))
        own = urlsplit(enforce_https(domain))
        target_key = _host_key(target.hostname, target.port, target.scheme.lower())
        own_key = _host_key(own.hostname, own.port, target.scheme.lower())
    except ValueError:
        return False

    return bool(target_key) and target_key == own_key


def is_valid_custom_code(code: str) -> bool:
    """Check that a caller-chosen shortcode is 1-32 chars of [A-Za-z0-9_-]."""
    return isinstance(code, str) and bool(_CUSTOM_CODE_RE.match(code))
