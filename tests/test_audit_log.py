"""Unit coverage for the JSONL audit sink."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from mcp_relaylocator.services.audit_log import (
    AUDIT_DIR_ENV,
    AUDIT_MAX_BYTES_ENV,
    DEFAULT_MAX_AUDIT_BYTES,
    AuditConfig,
    append_audit_event,
    read_audit_events,
    reset_audit_warning_state,
    set_audit_config,
    set_audit_warning_interval,
)


def _sample_event() -> dict[str, object]:
    return {
        "event": "RELAY_SELECTION_REJECTED",
        "source": "locator",
        "reason": "missing-fingerprint",
        "candidates_count": 1,
    }


def test_append_then_read_round_trip(tmp_path: Path) -> None:
    config = AuditConfig(audit_file=tmp_path / "nested" / "a.jsonl", max_bytes=None)
    set_audit_config(config)

    append_audit_event(_sample_event())
    append_audit_event({**_sample_event(), "reason": "no-endpoint"})

    events = read_audit_events()
    assert [event["reason"] for event in events] == [
        "missing-fingerprint",
        "no-endpoint",
    ]


def test_append_rotates_when_limit_exceeded(tmp_path: Path) -> None:
    audit_dir = tmp_path / "audit"
    audit_file = audit_dir / "audit.jsonl"
    config = AuditConfig(audit_file=audit_file, max_bytes=1)
    audit_dir.mkdir(parents=True)
    audit_file.write_text("old-value", encoding="utf-8")
    set_audit_config(config)

    append_audit_event(_sample_event())

    rotated = audit_file.with_name(audit_file.name + ".1")
    assert rotated.exists()
    assert rotated.read_text(encoding="utf-8") == "old-value"
    assert audit_file.exists()
    assert audit_file.read_text(encoding="utf-8")


def test_read_skips_corrupt_lines(tmp_path: Path) -> None:
    audit_file = tmp_path / "audit.jsonl"
    audit_file.write_text('{"reason": "no-endpoint"}\nnot-json\n\n', encoding="utf-8")

    events = read_audit_events(AuditConfig(audit_file=audit_file, max_bytes=None))

    assert events == [{"reason": "no-endpoint"}]


def test_append_handles_unwritable_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    audit_dir = tmp_path / "audit"
    audit_file = audit_dir / "audit.jsonl"
    audit_dir.mkdir(parents=True, exist_ok=True)
    audit_file.write_text("", encoding="utf-8")
    config = AuditConfig(audit_file=audit_file, max_bytes=None)
    set_audit_config(config)

    def fail_open(self: Path, *args: object, **kwargs: object) -> None:
        raise OSError("no space")

    monkeypatch.setattr(
        "mcp_relaylocator.services.audit_log.Path.open",
        fail_open,
    )

    append_audit_event(_sample_event())


def test_config_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv(AUDIT_DIR_ENV, str(tmp_path))
    monkeypatch.setenv(AUDIT_MAX_BYTES_ENV, "0")

    config = AuditConfig.from_env()

    assert config.audit_file.parent == tmp_path
    assert config.max_bytes is None

    monkeypatch.setenv(AUDIT_MAX_BYTES_ENV, "lots")
    assert AuditConfig.from_env().max_bytes == DEFAULT_MAX_AUDIT_BYTES

    monkeypatch.setenv(AUDIT_MAX_BYTES_ENV, "2048")
    assert AuditConfig.from_env().max_bytes == 2048


def test_warning_rate_limiting(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    audit_dir = tmp_path / "audit"
    audit_file = audit_dir / "audit.jsonl"
    config = AuditConfig(audit_file=audit_file, max_bytes=None)
    set_audit_config(config)
    reset_audit_warning_state()
    set_audit_warning_interval(10.0)

    def fail_mkdir(self: Path, *args: object, **kwargs: object) -> None:
        raise OSError("boom")

    monkeypatch.setattr(
        "mcp_relaylocator.services.audit_log.Path.mkdir",
        fail_mkdir,
    )

    class TimeStub:
        def __init__(self, values: list[float]) -> None:
            self.values = values

        def __call__(self) -> float:
            if self.values:
                return self.values.pop(0)
            return 999.0

    monkeypatch.setattr(
        "mcp_relaylocator.services.audit_log.time.monotonic",
        TimeStub([1.0, 1.0, 12.0]),
    )

    caplog.set_level(logging.WARNING)
    append_audit_event(_sample_event())
    append_audit_event(_sample_event())
    append_audit_event(_sample_event())

    warnings = [
        record
        for record in caplog.records
        if "Unable to create audit directory" in record.getMessage()
    ]
    assert len(warnings) == 2

    reset_audit_warning_state()
    set_audit_warning_interval(None)
