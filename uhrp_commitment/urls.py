"""
URL well-formedness predicate for commitment URLs.

Syntactic only: scheme and host shape are checked, nothing is resolved or
fetched.
"""

import ipaddress
import re
from urllib.parse import urlsplit

ALLOWED_SCHEMES = ("http", "https")

_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")
_WHITESPACE_RE = re.compile(r"\s")


def _is_valid_hostname(host: str) -> bool:
    if host == "localhost":
        return True

    if host.endswith("."):
        host = host[:-1]
    if not host or len(host) > 253:
        return False

    labels = host.split(".")
    if len(labels) < 2:
        return False
    if not all(_LABEL_RE.match(label) for label in labels):
        return False
    # The top-level label is never all digits; rejects things like "1.2.3.999"
    return not labels[-1].isdigit()


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        return False


def is_valid_url(text: str) -> bool:
    """Return True if text is a well-formed http(s) URL with a plausible host."""
    if not isinstance(text, str) or not text:
        return False
    if _WHITESPACE_RE.search(text):
        return False

    try:
        parts = urlsplit(text)
        port = parts.port
    except ValueError:
        return False

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return False

    host = parts.hostname
    if not host:
        return False
    if port is not None and not (0 < port <= 65535):
        return False

    return _is_ip_literal(host) or _is_valid_hostname(host)
