"""Core entities without I/O for relay endpoint selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union


class TransportSecurity(str, Enum):
    """Transport schemes the selector knows how to rank."""

    SECURE = "wss"
    PLAIN = "ws"


class AddressFamily(str, Enum):
    """Address families inferred from an endpoint URL."""

    ONION = "onion"
    IPV6 = "ipv6"
    IPV4 = "ipv4"
    UNKNOWN = "unknown"


class SelectionReason(str, Enum):
    """Why a selection produced no endpoint."""

    NO_ENDPOINT = "no-endpoint"
    MISSING_FINGERPRINT = "missing-fingerprint"
    FINGERPRINT_MISMATCH = "fingerprint-mismatch"


@dataclass(frozen=True)
class Endpoint:
    """Canonical connection target advertised by a relay locator."""

    url: str
    protocol: str
    family: str
    priority: int | float = 0
    fingerprint: str | None = None
    raw: Mapping[str, Any] = field(
        default_factory=dict, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("Endpoint url must be a non-empty string.")

    @property
    def transport_security(self) -> TransportSecurity | None:
        try:
            return TransportSecurity(self.protocol)
        except ValueError:
            return None

    def to_mapping(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "protocol": self.protocol,
            "family": self.family,
            "priority": self.priority,
            "fingerprint": self.fingerprint,
        }


@dataclass(frozen=True)
class SelectionSuccess:
    """A selection that produced a verified endpoint."""

    endpoint: Endpoint

    ok = True
    reason = None

    def to_mapping(self) -> dict[str, Any]:
        return {"endpoint": self.endpoint.to_mapping()}


@dataclass(frozen=True)
class SelectionFailure:
    """A selection that refused to produce an endpoint.

    ``expected_fingerprint`` and ``actual_fingerprint`` are only populated for
    :attr:`SelectionReason.FINGERPRINT_MISMATCH`.
    """

    reason: SelectionReason
    expected_fingerprint: str | None = None
    actual_fingerprint: str | None = None

    ok = False
    endpoint = None

    def to_mapping(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"endpoint": None, "reason": self.reason.value}
        if self.reason is SelectionReason.FINGERPRINT_MISMATCH:
            payload["expected_fingerprint"] = self.expected_fingerprint
            payload["actual_fingerprint"] = self.actual_fingerprint
        return payload


SelectionResult = Union[SelectionSuccess, SelectionFailure]
"""Tagged result of a single endpoint selection."""
