"""Reason codes used for PUBLIC resource error responses."""

from __future__ import annotations

INVALID_INPUT = "invalid_input"
"""Input failed schema validation or format checks."""

INVALID_LOCATOR = "invalid_locator"
"""The locator payload could not be decoded into a JSON object."""

RESPONSE_VALIDATION_FAILED = "response_validation_failed"
"""The service produced output that violated the public response schema."""
