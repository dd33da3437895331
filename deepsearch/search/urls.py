"""URL normalization and domain policy helpers."""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urljoin, urlsplit, urlunsplit

_DEFAULT_PORTS = {"http": 80, "https": 443}


def unwrap_redirect(url: str) -> str:
    """
    Return the destination of a search-provider redirect link.

    DuckDuckGo wraps organic links as ``//duckduckgo.com/l/?uddg=<encoded>``.
    Anything that is not a wrapper is returned with a scheme attached.
    """
    if not url:
        return url
    if url.startswith("//"):
        url = "https:" + url
    elif url.startswith("/"):
        url = urljoin("https://duckduckgo.com", url)

    parts = urlsplit(url)
    if parts.path.startswith("/l/") and parts.query:
        target = parse_qs(parts.query).get("uddg")
        if target and target[0]:
            return target[0]
    return url


def canonical_url(url: str) -> str:
    """
    Canonical form used as search hit identity.

    Lower-cases scheme and host, drops default ports, fragments and a trailing
    path slash. The query string is kept as-is. Unparseable input is returned
    unchanged.
    """
    try:
        parts = urlsplit(unwrap_redirect(url.strip()))
        scheme = parts.scheme.lower()
        host = (parts.hostname or "").lower()
        port = parts.port
    except ValueError:
        return url

    if not scheme or not host:
        return url

    netloc = host
    if port and _DEFAULT_PORTS.get(scheme) != port:
        netloc = f"{host}:{port}"

    path = parts.path or "/"
    if len(path) > 1:
        path = path.rstrip("/") or "/"

    return urlunsplit((scheme, netloc, path, parts.query, ""))


def extract_domain(url: str) -> str:
    """Host name of ``url`` or an empty string."""
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def _pattern_matches(pattern: str, domain: str) -> bool:
    if "*" in pattern:
        regex = ".*".join(re.escape(piece) for piece in pattern.split("*"))
        return re.fullmatch(regex, domain) is not None
    return pattern in domain


class DomainFilter:
    """Blocked/allowed domain policy applied before fetching a page."""

    def __init__(self, allowed: list[str] | None = None, blocked: list[str] | None = None):
        self.allowed = [p.lower() for p in (allowed if allowed is not None else ["*"])]
        self.blocked = [p.lower() for p in (blocked or [])]

    def is_allowed(self, url: str) -> bool:
        domain = extract_domain(url)
        if not domain:
            return False

        for pattern in self.blocked:
            if _pattern_matches(pattern, domain):
                return False

        if "*" in self.allowed:
            return True
        return any(_pattern_matches(pattern, domain) for pattern in self.allowed)
