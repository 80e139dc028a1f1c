"""Audit trail for endpoint selections that were refused."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import MutableSequence, Protocol

from ..domain.models import SelectionFailure, SelectionReason
from .audit_log import append_audit_event

_LOG = logging.getLogger(__name__)
_EVENTS: MutableSequence[dict[str, object]] = []
EVENT_NAME = "RELAY_SELECTION_REJECTED"


class SelectionAuditSink(Protocol):
    """Protocol describing a selection audit sink."""

    def emit(self, entry: dict[str, object]) -> None:  # pragma: no cover - trivial
        ...


@dataclass
class InMemorySelectionAuditSink:
    """Sink that keeps events in a list for inspection."""

    events: MutableSequence[dict[str, object]]

    def emit(self, entry: dict[str, object]) -> None:
        self.events.append(dict(entry))


class ProductionSelectionAuditSink:
    """Sink that writes events to the persistent audit log."""

    __slots__ = ()

    def emit(self, entry: dict[str, object]) -> None:
        try:
            append_audit_event(entry)
        except (OSError, TypeError, ValueError) as exc:
            _LOG.warning("Unable to record selection audit event: %s", exc)


_IN_MEMORY_SINK = InMemorySelectionAuditSink(events=_EVENTS)
_DEFAULT_PRODUCTION_SINK: SelectionAuditSink = ProductionSelectionAuditSink()
_PRODUCTION_SINK: SelectionAuditSink | None = _DEFAULT_PRODUCTION_SINK


def set_production_selection_audit_sink(sink: SelectionAuditSink | None) -> None:
    """Override the production audit sink; None disables it."""

    global _PRODUCTION_SINK
    _PRODUCTION_SINK = sink


def reset_production_selection_audit_sink() -> None:
    set_production_selection_audit_sink(_DEFAULT_PRODUCTION_SINK)


def log_selection_failure(source: str, failure: SelectionFailure) -> None:
    """Surface a refusal to operators at a severity matching its risk."""

    if failure.reason is SelectionReason.FINGERPRINT_MISMATCH:
        _LOG.error(
            "Fingerprint mismatch for %s endpoint (expected %s but got %s); "
            "rejecting.",
            source,
            failure.expected_fingerprint,
            failure.actual_fingerprint,
        )
    elif failure.reason is SelectionReason.MISSING_FINGERPRINT:
        _LOG.warning("Secure %s endpoint has no fingerprint; rejecting.", source)
    else:
        _LOG.warning("No usable %s endpoint selected.", source)


def record_selection_rejected(
    source: str,
    failure: SelectionFailure,
    candidates_count: int,
) -> None:
    """Log a refused selection and record it for auditing."""

    log_selection_failure(source, failure)
    entry: dict[str, object] = {
        "event": EVENT_NAME,
        "recorded_at": datetime.now(timezone.utc).isoformat(),
        "source": source,
        "reason": failure.reason.value,
        "candidates_count": candidates_count,
    }
    if failure.reason is SelectionReason.FINGERPRINT_MISMATCH:
        entry["expected_fingerprint"] = failure.expected_fingerprint
        entry["actual_fingerprint"] = failure.actual_fingerprint

    _IN_MEMORY_SINK.emit(entry)
    if _PRODUCTION_SINK is not None:
        _PRODUCTION_SINK.emit(entry)


def get_selection_events() -> list[dict[str, object]]:
    """Return a snapshot of recorded selection events."""

    return list(_EVENTS)


def clear_selection_events() -> None:
    _EVENTS.clear()
