"""Tests for environment and client-config sourced selection options."""

from __future__ import annotations

import pytest

from mcp_relaylocator.services.selection_config import (
    DEFAULT_SELECTION_OPTIONS,
    EXPECTED_FINGERPRINT_ENV,
    PREFER_ONION_ENV,
    SelectionOptions,
)


def test_defaults_without_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(PREFER_ONION_ENV, raising=False)
    monkeypatch.delenv(EXPECTED_FINGERPRINT_ENV, raising=False)

    assert SelectionOptions.from_env() == DEFAULT_SELECTION_OPTIONS
    assert DEFAULT_SELECTION_OPTIONS.prefer_onion is False
    assert DEFAULT_SELECTION_OPTIONS.expected_fingerprint is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1", True),
        ("true", True),
        ("YES", True),
        (" on ", True),
        ("0", False),
        ("false", False),
        ("maybe", False),
        ("   ", False),
    ],
)
def test_prefer_onion_env_parsing(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
) -> None:
    monkeypatch.setenv(PREFER_ONION_ENV, raw)

    assert SelectionOptions.from_env().prefer_onion is expected


def test_expected_fingerprint_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(EXPECTED_FINGERPRINT_ENV, "  TESTKEY:pin  ")
    assert SelectionOptions.from_env().expected_fingerprint == "TESTKEY:pin"

    monkeypatch.setenv(EXPECTED_FINGERPRINT_ENV, "  ")
    assert SelectionOptions.from_env().expected_fingerprint is None


def test_from_client_config_reads_camel_case_keys() -> None:
    options = SelectionOptions.from_config(
        {"torPreferred": True, "ncc02ExpectedKey": "TESTKEY:svc", "relayUrl": "x"}
    )

    assert options == SelectionOptions(
        prefer_onion=True, expected_fingerprint="TESTKEY:svc"
    )


def test_from_config_key_precedence() -> None:
    options = SelectionOptions.from_config(
        {
            "torPreferred": False,
            "prefer_onion": True,
            "expectedK": "first",
            "expected_fingerprint": "last",
        }
    )

    assert options.prefer_onion is False
    assert options.expected_fingerprint == "first"


def test_from_config_ignores_blank_values() -> None:
    options = SelectionOptions.from_config(
        {"torPreferred": None, "prefer_onion": 1, "expectedK": ""}
    )

    assert options.prefer_onion is True
    assert options.expected_fingerprint is None


def test_from_empty_config_returns_defaults() -> None:
    assert SelectionOptions.from_config({}) is DEFAULT_SELECTION_OPTIONS
    assert SelectionOptions.from_config(None) is DEFAULT_SELECTION_OPTIONS
