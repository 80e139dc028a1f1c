"""Turn loosely-shaped locator descriptors into canonical endpoints."""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

from ..domain.models import Endpoint, TransportSecurity
from .family import classify_family

URL_KEYS = ("url", "uri", "value")
"""Descriptor keys that may carry the endpoint address, in lookup order."""

PROTOCOL_KEYS = ("protocol", "type")
"""Descriptor keys that may carry the transport scheme."""

FAMILY_OVERRIDE_KEY = "family"

PRIORITY_KEYS = ("priority", "prio")
"""Descriptor keys that may carry the numeric priority."""

FINGERPRINT_KEYS = ("k", "fingerprint")
"""Descriptor keys that may carry the pinned trust anchor."""

SECURE_SCHEME_PREFIX = "wss://"


def _first_text(descriptor: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    """Return the first non-empty string stored under ``keys``."""

    for key in keys:
        value = descriptor.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _first_present(descriptor: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = descriptor.get(key)
        if value is not None:
            return value
    return None


def coerce_number(value: Any) -> int | float:
    """Coerce ``value`` to a finite number, falling back to 0."""

    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return 0
    else:
        return 0

    if not math.isfinite(number):
        return 0
    if number.is_integer():
        return int(number)
    return number


def normalize_endpoint(descriptor: Any) -> Endpoint | None:
    """Return the canonical endpoint for one descriptor, or None to drop it."""

    if not isinstance(descriptor, Mapping):
        return None

    url = _first_text(descriptor, URL_KEYS)
    if url is None:
        return None

    protocol = _first_text(descriptor, PROTOCOL_KEYS)
    if protocol is None:
        protocol = (
            TransportSecurity.SECURE.value
            if url.startswith(SECURE_SCHEME_PREFIX)
            else TransportSecurity.PLAIN.value
        )

    override = descriptor.get(FAMILY_OVERRIDE_KEY)
    family = classify_family(url, override if isinstance(override, str) else None)

    return Endpoint(
        url=url,
        protocol=protocol,
        family=family,
        priority=coerce_number(_first_present(descriptor, PRIORITY_KEYS)),
        fingerprint=_first_text(descriptor, FINGERPRINT_KEYS),
        raw=descriptor,
    )


def normalize_endpoints(descriptors: Iterable[Any] | None) -> list[Endpoint]:
    """Normalize descriptors in order, silently dropping unusable entries."""

    endpoints: list[Endpoint] = []
    for descriptor in descriptors or ():
        endpoint = normalize_endpoint(descriptor)
        if endpoint is not None:
            endpoints.append(endpoint)
    return endpoints
