"""Best-effort address family inference for locator endpoints."""

from __future__ import annotations

from ..domain.models import AddressFamily

ONION_SUFFIX = ".onion"
"""Top-level suffix that marks a hidden-service address."""


def classify_family(url: str | None, override: str | None = None) -> str:
    """Return the address family for ``url``.

    A non-empty ``override`` is returned verbatim without validation. The
    remaining checks are ordered: onion suffix, then a bracketed literal
    (IPv6), then IPv4 as the default.
    """

    if override:
        return override
    if not url:
        return AddressFamily.UNKNOWN.value
    if ONION_SUFFIX in url:
        return AddressFamily.ONION.value
    if "[" in url and "]" in url:
        return AddressFamily.IPV6.value
    return AddressFamily.IPV4.value
