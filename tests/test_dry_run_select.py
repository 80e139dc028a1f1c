"""Smoke test for the local dry-run selection CLI."""

from __future__ import annotations

import json
import os
import subprocess
import sys
import time
from pathlib import Path


def _write_locator(tmp_path: Path, updated_at: int) -> Path:
    locator = tmp_path / "locator.json"
    locator.write_text(
        json.dumps(
            {
                "ttl": 600,
                "updated_at": updated_at,
                "endpoints": [
                    {"url": "wss://198.51.100.4:7447", "priority": 1, "k": "TESTKEY:a"},
                    {"url": "wss://exampleonion.onion", "priority": 9, "k": "TESTKEY:a"},
                ],
            }
        ),
        encoding="utf-8",
    )
    return locator


def _run(tmp_path: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = dict(os.environ, RELAYLOCATOR_AUDIT_DIR=str(tmp_path / "audit"))
    return subprocess.run(
        [sys.executable, "scripts/dry_run_select.py", *args],
        cwd=Path(__file__).resolve().parents[1],
        capture_output=True,
        text=True,
        env=env,
    )


def test_dry_run_prefers_onion(tmp_path: Path) -> None:
    locator = _write_locator(tmp_path, int(time.time()))

    result = _run(
        tmp_path,
        str(locator),
        "--prefer-onion",
        "--expected-fingerprint",
        "TESTKEY:a",
    )

    assert result.returncode == 0
    data = json.loads(result.stdout.strip())
    assert data["url"] == "wss://exampleonion.onion"
    assert data["source"] == "locator"


def test_dry_run_reports_stale_locator(tmp_path: Path) -> None:
    locator = _write_locator(tmp_path, 1)

    result = _run(tmp_path, str(locator))

    assert result.returncode == 1
    assert json.loads(result.stdout.strip())["reason"] == "stale-locator"

    result = _run(tmp_path, str(locator), "--allow-stale")

    assert result.returncode == 0
    assert json.loads(result.stdout.strip())["url"] == "wss://198.51.100.4:7447"
