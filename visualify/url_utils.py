"""Shared URL utilities: build capture URLs and match request hosts."""

from __future__ import annotations

from urllib.parse import urlparse


def join_url(base_url: str, suffix: str) -> str:
    """Concatenate a domain base URL and a path suffix.

    Plain concatenation, except that a doubled slash at the seam is collapsed.
    """
    if base_url.endswith("/") and suffix.startswith("/"):
        return base_url + suffix[1:]
    return base_url + suffix


def host_of(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def host_matches(host: str, blocked_hosts: list[str]) -> bool:
    """True when host equals a blocked host or is one of its subdomains."""
    host = host.lower().rstrip(".")
    for blocked in blocked_hosts:
        blocked = blocked.lower().strip().rstrip(".")
        if not blocked:
            continue
        if host == blocked or host.endswith("." + blocked):
            return True
    return False
