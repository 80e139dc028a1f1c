"""Minimal FastMCP-style server entrypoint for relay endpoint resolution."""

from __future__ import annotations

import sys
from typing import Any, Mapping

from ..services.locator import (
    FallbackRecord,
    parse_locator_payload,
    resolve_endpoint,
)
from ..services.normalizer import normalize_endpoints
from ..services.selection_audit import record_selection_rejected
from ..services.selection_config import SelectionOptions
from ..services.selector import select_endpoint
from . import reason_codes, schema_registry
from .schema_registry import SchemaValidationError

SELECT_INPUT_SCHEMA = "endpoint_select_input_v0.1"
SELECT_RESPONSE_SCHEMA = "endpoint_select_response_v0.1"
RESOLVE_INPUT_SCHEMA = "locator_resolve_input_v0.1"
RESOLVE_RESPONSE_SCHEMA = "locator_resolve_response_v0.1"

SOURCE_REQUEST = "request"


def _error(reason: str, detail: str) -> dict[str, str]:
    """Return an error payload with a stable reason code."""

    return {"status": "error", "reason": reason, "detail": detail}


def _options_from_request(request: Mapping[str, Any]) -> SelectionOptions:
    options = request.get("options") or {}
    return SelectionOptions(
        prefer_onion=bool(options.get("prefer_onion", False)),
        expected_fingerprint=options.get("expected_fingerprint"),
    )


class HealthResource:
    """Simple wellbeing resource."""

    __slots__ = ()

    def get_status(self) -> Mapping[str, str]:
        return {
            "status": "ok",
            "detail": "Relay locator FastMCP server ready",
        }

    def __call__(self) -> Mapping[str, str]:
        return self.get_status()


class EndpointSelectResource:
    """PUBLIC entrypoint that picks one endpoint from raw descriptors."""

    __slots__ = ()

    def __call__(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        return self.select(request)

    def get_status(self) -> Mapping[str, str]:
        return {
            "status": "ok",
            "detail": "PUBLIC endpoint selection resource ready",
        }

    def select(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        try:
            schema_registry.validate(SELECT_INPUT_SCHEMA, request)
        except SchemaValidationError:
            return _error(reason_codes.INVALID_INPUT, "Request failed validation.")

        endpoints = normalize_endpoints(request["endpoints"])
        selection = select_endpoint(endpoints, _options_from_request(request))
        if not selection.ok:
            record_selection_rejected(SOURCE_REQUEST, selection, len(endpoints))

        response = {
            "operation": "endpoint_select",
            "status": "ok" if selection.ok else "rejected",
            "candidates_count": len(endpoints),
            "selection": selection.to_mapping(),
        }

        try:
            schema_registry.validate(SELECT_RESPONSE_SCHEMA, response)
        except SchemaValidationError:
            return _error(
                reason_codes.RESPONSE_VALIDATION_FAILED,
                "Service output did not meet the public contract.",
            )

        return response


class LocatorResolveResource:
    """PUBLIC entrypoint resolving a locator payload with a record fallback.

    The payload may be the stored JSON text or an already-decoded object.
    """

    __slots__ = ()

    def __call__(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        return self.resolve(request)

    def get_status(self) -> Mapping[str, str]:
        return {
            "status": "ok",
            "detail": "PUBLIC locator resolution resource ready",
        }

    def resolve(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        try:
            schema_registry.validate(RESOLVE_INPUT_SCHEMA, request)
        except SchemaValidationError:
            return _error(reason_codes.INVALID_INPUT, "Request failed validation.")

        payload = request.get("payload")
        if isinstance(payload, str):
            payload = parse_locator_payload(payload)
            if payload is None:
                return _error(
                    reason_codes.INVALID_LOCATOR,
                    "Locator payload is not a JSON object.",
                )

        fallback = None
        if request.get("fallback"):
            fallback = FallbackRecord.from_mapping(request["fallback"])

        resolution = resolve_endpoint(
            payload,
            options=_options_from_request(request),
            fallback=fallback,
            now=request.get("now"),
            allow_stale=bool(request.get("allow_stale", False)),
        )

        response = {
            "operation": "locator_resolve",
            "status": "ok" if resolution.ok else "rejected",
            **resolution.to_mapping(),
        }

        try:
            schema_registry.validate(RESOLVE_RESPONSE_SCHEMA, response)
        except SchemaValidationError:
            return _error(
                reason_codes.RESPONSE_VALIDATION_FAILED,
                "Resolve response violated the public contract.",
            )

        return response


RESOURCE_REGISTRY = {
    "health": HealthResource(),
    "public://endpoint/select": EndpointSelectResource(),
    "public://locator/resolve": LocatorResolveResource(),
}
"""Resource registry for FastMCP tooling."""


def create_server() -> Mapping[str, Mapping[str, Any]]:
    """Return the configured resources for this FastMCP server."""

    return {"resources": RESOURCE_REGISTRY}


def main() -> None:
    """Log available resources without launching networking."""

    sys.stdout.write("FastMCP relay locator server initialized with resources:\n\n")
    for name, resource in RESOURCE_REGISTRY.items():
        sys.stdout.write(f"- {name}: {resource.get_status()}\n")


if __name__ == "__main__":
    main()
