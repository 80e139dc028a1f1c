"""Configurable selection policy for relay endpoint resolution."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

PREFER_ONION_ENV = "RELAYLOCATOR_PREFER_ONION"
EXPECTED_FINGERPRINT_ENV = "RELAYLOCATOR_EXPECTED_FINGERPRINT"

_TRUTHY = frozenset({"1", "true", "yes", "on"})

PREFER_ONION_CONFIG_KEYS = ("torPreferred", "prefer_onion")
"""Client config keys that toggle onion preference, in lookup order."""

EXPECTED_FINGERPRINT_CONFIG_KEYS = (
    "expectedK",
    "ncc02ExpectedKey",
    "expected_fingerprint",
)
"""Client config keys that carry the pinned fingerprint, in lookup order."""


def _env_bool(name: str, default: bool) -> bool:
    """Return a boolean flag sourced from the environment."""

    raw = os.getenv(name)
    if not raw or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _env_text(name: str) -> str | None:
    raw = os.getenv(name)
    if not raw or not raw.strip():
        return None
    return raw.strip()


@dataclass(frozen=True)
class SelectionOptions:
    """Policy knobs consulted by the endpoint selector.

    ``prefer_onion`` picks the first onion endpoint regardless of priority.
    ``expected_fingerprint`` pins the identity a secure endpoint must carry.
    """

    prefer_onion: bool = False
    expected_fingerprint: str | None = None

    @classmethod
    def from_env(cls) -> "SelectionOptions":
        """Return options using the configured environment variables."""

        return cls(
            prefer_onion=_env_bool(PREFER_ONION_ENV, False),
            expected_fingerprint=_env_text(EXPECTED_FINGERPRINT_ENV),
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None) -> "SelectionOptions":
        """Return options read from an already-parsed client config mapping."""

        if not config:
            return DEFAULT_SELECTION_OPTIONS

        prefer_onion = False
        for key in PREFER_ONION_CONFIG_KEYS:
            if key in config and config[key] is not None:
                prefer_onion = bool(config[key])
                break

        expected = None
        for key in EXPECTED_FINGERPRINT_CONFIG_KEYS:
            value = config.get(key)
            if isinstance(value, str) and value:
                expected = value
                break

        return cls(prefer_onion=prefer_onion, expected_fingerprint=expected)


DEFAULT_SELECTION_OPTIONS = SelectionOptions()
