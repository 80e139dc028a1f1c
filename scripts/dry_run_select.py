"""LOCAL-only CLI to dry-run endpoint resolution against a stored locator."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT.parent / "src"))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Resolve the endpoint a client would dial for a locator.",
    )
    parser.add_argument(
        "locator_path",
        type=Path,
        help="Path to the locator payload JSON to evaluate locally.",
    )
    parser.add_argument(
        "--prefer-onion",
        action="store_true",
        help="Pick an onion endpoint ahead of priority when one exists.",
    )
    parser.add_argument(
        "--expected-fingerprint",
        default=None,
        help="Pinned fingerprint a secure endpoint must present.",
    )
    parser.add_argument(
        "--allow-stale",
        action="store_true",
        help="Accept a locator whose TTL window has passed.",
    )
    return parser.parse_args(argv)


def load_payload(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    from mcp_relaylocator.services.locator import (
        parse_locator_payload,
        resolve_endpoint,
    )
    from mcp_relaylocator.services.selection_config import SelectionOptions

    payload = parse_locator_payload(load_payload(args.locator_path))
    if payload is None:
        sys.stderr.write("Locator file is not a JSON object.\n")
        return 2

    resolution = resolve_endpoint(
        payload,
        options=SelectionOptions(
            prefer_onion=args.prefer_onion,
            expected_fingerprint=args.expected_fingerprint,
        ),
        allow_stale=args.allow_stale,
    )

    sys.stdout.write(json.dumps(resolution.to_mapping(), ensure_ascii=False))
    sys.stdout.write("\n")
    return 0 if resolution.ok else 1


if __name__ == "__main__":
    sys.exit(main())
