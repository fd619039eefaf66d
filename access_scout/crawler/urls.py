# access_scout/crawler/urls.py
"""
URL canonicalisation and same-origin checks for AccessScout.

Two URLs address the same page iff their canonical forms are equal.
"""
from __future__ import annotations

from typing import FrozenSet, Iterable, List
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

TRACKING_PARAMS: FrozenSet[str] = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_term",
        "utm_content",
        "ref",
        "fbclid",
        "gclid",
    }
)

_DEFAULT_PORTS = (80, 443)
_SKIPPED_SCHEMES = ("mailto:", "javascript:", "tel:", "data:")


def _strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


def normalize_url(url: str) -> str:
    """
    Canonicalise *url*: https scheme, no default port, lower-case host without
    a leading ``www.``, no fragment, no trailing slash except for the root path,
    tracking query parameters removed.

    Returns *url* unchanged when it cannot be parsed as an absolute URL.
    """
    try:
        parts = urlsplit(url.strip())
        if not parts.netloc or not parts.hostname:
            return url
        host = _strip_www(parts.hostname.lower())
        if ":" in host:
            host = f"[{host}]"
        port = parts.port
    except (ValueError, AttributeError):
        return url

    netloc = host if port is None or port in _DEFAULT_PORTS else f"{host}:{port}"
    if parts.username:
        userinfo = parts.username if parts.password is None else f"{parts.username}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    path = parts.path.rstrip("/") or "/"
    query = urlencode(
        [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if key.lower() not in TRACKING_PARAMS
        ],
        doseq=True,
    )
    return urlunsplit(("https", netloc, path, query, ""))


def host_key(url: str) -> str:
    """Host used for origin comparison: lower-case, port kept, ``www.`` removed."""
    try:
        parts = urlsplit(url.strip())
        host = (parts.hostname or "").lower()
        port = parts.port
    except ValueError:
        return ""
    host = _strip_www(host)
    if port is None or port in _DEFAULT_PORTS:
        return host
    return f"{host}:{port}"


def is_same_origin(url: str, seed_url: str) -> bool:
    """True if *url* lives on the seed's host (``www.`` ignored on both sides)."""
    key = host_key(url)
    return bool(key) and key == host_key(seed_url)


def same_origin_links(hrefs: Iterable[str], page_url: str, seed_url: str) -> List[str]:
    """
    Resolve *hrefs* against *page_url*, drop non-HTTP schemes, fragments and
    foreign hosts. Order is preserved, duplicates (by canonical form) removed.
    """
    seen: set[str] = set()
    links: List[str] = []
    for raw in hrefs:
        if not isinstance(raw, str):
            continue
        href = raw.strip()
        if not href or href.lower().startswith(_SKIPPED_SCHEMES):
            continue
        try:
            absolute = urljoin(page_url, href).split("#", 1)[0]
            scheme = urlsplit(absolute).scheme
        except ValueError:
            continue
        if scheme not in ("http", "https"):
            continue
        if not is_same_origin(absolute, seed_url):
            continue
        canonical = normalize_url(absolute)
        if canonical in seen:
            continue
        seen.add(canonical)
        links.append(absolute)
    return links


__all__ = ["TRACKING_PARAMS", "normalize_url", "host_key", "is_same_origin", "same_origin_links"]
