"""Shared fixtures keeping the selection audit trail isolated per test."""

from __future__ import annotations

from pathlib import Path

import pytest

from mcp_relaylocator.services.audit_log import (
    AuditConfig,
    reset_audit_config,
    set_audit_config,
)
from mcp_relaylocator.services.selection_audit import clear_selection_events


@pytest.fixture(autouse=True)
def isolated_audit_log(tmp_path: Path) -> Path:
    """Route persisted audit events into the test's temporary directory."""

    audit_file = tmp_path / "audit" / "selection_audit.jsonl"
    set_audit_config(AuditConfig(audit_file=audit_file, max_bytes=None))
    clear_selection_events()
    yield audit_file
    clear_selection_events()
    reset_audit_config()
