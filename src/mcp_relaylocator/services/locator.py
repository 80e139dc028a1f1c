"""Locator payload handling and endpoint resolution with a record fallback.

A locator payload is the short-lived advertisement a relay publishes::

    {"ttl": 3600, "updated_at": 1700000000, "endpoints": [{...}, ...]}

Resolution prefers a fresh locator. When the locator is stale, missing, or
yields no acceptable endpoint, the relay's long-lived service record URL is
tried under the same fingerprint rules.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from ..domain.models import SelectionReason, SelectionResult
from .normalizer import coerce_number, normalize_endpoint, normalize_endpoints
from .selection_audit import record_selection_rejected
from .selection_config import DEFAULT_SELECTION_OPTIONS, SelectionOptions
from .selector import select_endpoint

_LOG = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600
"""Lifetime granted to a freshly built locator payload."""

SOURCE_LOCATOR = "locator"
SOURCE_FALLBACK = "fallback"

STALE_LOCATOR = "stale-locator"
"""Resolution reason used when a locator was supplied but has expired."""


def _now() -> int:
    return int(time.time())


def build_locator_payload(
    endpoints: Iterable[Any],
    ttl: int = DEFAULT_TTL_SECONDS,
    updated_at: int | None = None,
) -> dict[str, Any]:
    """Build a locator payload with normalized endpoint entries."""

    return {
        "ttl": ttl,
        "updated_at": _now() if updated_at is None else updated_at,
        "endpoints": [ep.to_mapping() for ep in normalize_endpoints(endpoints)],
    }


def parse_locator_payload(content: Any) -> dict[str, Any] | None:
    """Decode stored locator content; anything but a JSON object yields None."""

    if not isinstance(content, str):
        return None
    try:
        payload = json.loads(content)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def is_locator_fresh(
    payload: Any,
    now: int | None = None,
    allow_stale: bool = False,
) -> bool:
    """Return True when ``payload`` is still inside its TTL window.

    A payload without a positive TTL is never fresh, even with
    ``allow_stale``.
    """

    if not isinstance(payload, Mapping):
        return False
    ttl = coerce_number(payload.get("ttl"))
    updated = coerce_number(payload.get("updated_at"))
    if ttl <= 0:
        return False
    if allow_stale:
        return True
    timestamp = _now() if now is None else now
    return timestamp <= updated + ttl


@dataclass(frozen=True)
class FallbackRecord:
    """Long-lived service record URL published alongside the locator."""

    url: str
    fingerprint: str | None = None
    expires_at: int | None = None

    def is_fresh(self, now: int) -> bool:
        return not self.expires_at or now <= self.expires_at

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FallbackRecord":
        expires_at = data.get("expires_at", data.get("exp"))
        return cls(
            url=str(data.get("url") or data.get("u") or ""),
            fingerprint=data.get("fingerprint") or data.get("k") or None,
            expires_at=int(coerce_number(expires_at)) or None,
        )


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a relay endpoint.

    ``url`` is None on failure, in which case ``reason`` names why.
    ``selection`` carries the selector result that decided the outcome, when
    the selector ran.
    """

    url: str | None
    source: str | None
    selection: SelectionResult | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.url is not None

    def to_mapping(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "url": self.url,
            "source": self.source,
            "reason": self.reason,
        }
        if self.selection is not None:
            payload["selection"] = self.selection.to_mapping()
        return payload


def _select_fallback(
    fallback: FallbackRecord, options: SelectionOptions
) -> SelectionResult:
    endpoint = normalize_endpoint({"url": fallback.url, "k": fallback.fingerprint})
    candidates = [endpoint] if endpoint is not None else []
    return select_endpoint(
        candidates,
        SelectionOptions(expected_fingerprint=options.expected_fingerprint),
    )


def resolve_endpoint(
    locator_payload: Mapping[str, Any] | None,
    options: SelectionOptions | None = None,
    fallback: FallbackRecord | None = None,
    now: int | None = None,
    allow_stale: bool = False,
) -> Resolution:
    """Resolve the URL to dial from a locator payload and optional fallback."""

    options = options or DEFAULT_SELECTION_OPTIONS
    timestamp = _now() if now is None else now
    selection: SelectionResult | None = None
    reason: str | None = None

    if locator_payload is not None:
        if is_locator_fresh(locator_payload, now=timestamp, allow_stale=allow_stale):
            raw_endpoints = locator_payload.get("endpoints")
            if not isinstance(raw_endpoints, (list, tuple)):
                raw_endpoints = []
            endpoints = normalize_endpoints(raw_endpoints)
            selection = select_endpoint(endpoints, options)
            if selection.ok:
                _LOG.info(
                    "Selected locator endpoint %s (%s/%s).",
                    selection.endpoint.url,
                    selection.endpoint.protocol,
                    selection.endpoint.family,
                )
                return Resolution(
                    url=selection.endpoint.url,
                    source=SOURCE_LOCATOR,
                    selection=selection,
                )
            record_selection_rejected(SOURCE_LOCATOR, selection, len(endpoints))
            reason = selection.reason.value
        else:
            _LOG.warning("Locator payload is stale or missing a TTL.")
            reason = STALE_LOCATOR

    if fallback is not None:
        if fallback.is_fresh(timestamp):
            fallback_selection = _select_fallback(fallback, options)
            if fallback_selection.ok:
                _LOG.info("Falling back to service record URL %s.", fallback.url)
                return Resolution(
                    url=fallback_selection.endpoint.url,
                    source=SOURCE_FALLBACK,
                    selection=fallback_selection,
                )
            record_selection_rejected(SOURCE_FALLBACK, fallback_selection, 1)
            return Resolution(
                url=None,
                source=SOURCE_FALLBACK,
                selection=fallback_selection,
                reason=fallback_selection.reason.value,
            )
        _LOG.warning("Fallback service record has expired.")

    return Resolution(
        url=None,
        source=None,
        selection=selection,
        reason=reason or SelectionReason.NO_ENDPOINT.value,
    )
