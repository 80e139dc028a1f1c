"""Fail-closed choice of the single endpoint a client should dial.

Policy, evaluated in order:
1. Secure (``wss``) endpoints rank ahead of plain (``ws``) ones; any other
   protocol is never a candidate.
2. With onion preference on, the first onion endpoint wins outright, secure
   group first, ignoring priority.
3. Otherwise the lowest priority number wins within the best non-empty group;
   ties keep list order.
4. A secure candidate must carry a fingerprint, and must match the expected
   fingerprint when one is pinned. Plain candidates are not pinned.

Every refusal is returned as a :class:`SelectionFailure`; nothing raises.
"""

from __future__ import annotations

from typing import Sequence

from ..domain.models import (
    AddressFamily,
    Endpoint,
    SelectionFailure,
    SelectionReason,
    SelectionResult,
    SelectionSuccess,
    TransportSecurity,
)
from .selection_config import DEFAULT_SELECTION_OPTIONS, SelectionOptions


def _first_onion(group: Sequence[Endpoint]) -> Endpoint | None:
    for endpoint in group:
        if endpoint.family == AddressFamily.ONION.value:
            return endpoint
    return None


def _lowest_priority(group: Sequence[Endpoint]) -> Endpoint | None:
    if not group:
        return None
    # min() keeps the first of equal keys, matching a stable ascending sort.
    return min(group, key=lambda endpoint: endpoint.priority)


def _pick_candidate(
    secure: Sequence[Endpoint],
    plain: Sequence[Endpoint],
    prefer_onion: bool,
) -> Endpoint | None:
    if prefer_onion:
        candidate = _first_onion(secure) or _first_onion(plain)
        if candidate is not None:
            return candidate
    return _lowest_priority(secure) or _lowest_priority(plain)


def select_endpoint(
    endpoints: Sequence[Endpoint],
    options: SelectionOptions | None = None,
) -> SelectionResult:
    """Choose the preferred endpoint and verify its pinned fingerprint."""

    options = options or DEFAULT_SELECTION_OPTIONS
    secure = [ep for ep in endpoints if ep.protocol == TransportSecurity.SECURE.value]
    plain = [ep for ep in endpoints if ep.protocol == TransportSecurity.PLAIN.value]

    candidate = _pick_candidate(secure, plain, options.prefer_onion)
    if candidate is None:
        return SelectionFailure(SelectionReason.NO_ENDPOINT)

    if candidate.protocol == TransportSecurity.SECURE.value:
        if not candidate.fingerprint:
            return SelectionFailure(SelectionReason.MISSING_FINGERPRINT)
        expected = options.expected_fingerprint
        if expected and candidate.fingerprint != expected:
            return SelectionFailure(
                SelectionReason.FINGERPRINT_MISMATCH,
                expected_fingerprint=expected,
                actual_fingerprint=candidate.fingerprint,
            )

    return SelectionSuccess(candidate)
