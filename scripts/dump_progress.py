#!/usr/bin/env python3
"""Inspect (and optionally update) a stored progress record.

Reads the aggregate record from a file-backed store and prints the
record and its dashboard summary.  With ``--report`` it first merges one
activity result, exactly as an activity module would.

Usage
-----
::

    export PROGRESS_STORAGE_DIR="$HOME/.local/share/progress"
    python scripts/dump_progress.py

Options::

    --storage-dir DIR    Directory holding the record (default: $PROGRESS_STORAGE_DIR)
    --key NAME           Storage key (default: gameProgress)
    --json               Output as machine-readable JSON
    --report ID          Report a result for activity ID before dumping
    --score N            Score for --report (default: 0)
    --stars N            Stars for --report (default: 0)
    --badge NAME         Badge for --report (repeatable)
    --completed          Mark the --report activity as completed
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyprogress import PersistenceError, ProgressConfig, ProgressConfigError, ProgressReporter  # noqa: E402
from pyprogress.models import AggregateRecord, ProgressSummary  # noqa: E402


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _render_text(record: AggregateRecord, summary: ProgressSummary) -> str:
    lines = [_section("Account")]
    lines.append(f"  Level:       {record.level}  ({record.experience}/100 xp)")
    lines.append(f"  Stars:       {record.total_stars}")
    lines.append(f"  Badges:      {', '.join(sorted(record.total_badges)) or '-'}")
    lines.append(
        f"  Completed:   {summary.completed_activities}/{summary.total_activities}"
        f"  ({summary.completion_percentage}%)"
    )
    lines.append(_section("Activities"))
    if not record.per_activity:
        lines.append("  (none reported yet)")
    for activity_id, entry in record.per_activity.items():
        mark = "x" if entry.completed else " "
        badges = ", ".join(sorted(entry.badges)) or "-"
        lines.append(f"  [{mark}] {activity_id}: score={entry.score} stars={entry.stars} badges={badges}")
    return "\n".join(lines)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Inspect a stored progress record",
    )
    parser.add_argument("--storage-dir", help="Directory holding the record")
    parser.add_argument("--key", help="Storage key")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--report", metavar="ID", help="Report a result for this activity first")
    parser.add_argument("--score", type=int, default=0, help="Score for --report")
    parser.add_argument("--stars", type=int, default=0, help="Stars for --report")
    parser.add_argument("--badge", action="append", default=[], help="Badge for --report (repeatable)")
    parser.add_argument("--completed", action="store_true", help="Mark the --report activity as completed")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, Any] = {}
    if args.storage_dir:
        overrides["storage_dir"] = Path(args.storage_dir).expanduser()
    if args.key:
        overrides["storage_key"] = args.key
    try:
        config = ProgressConfig.from_env(**overrides)
    except ProgressConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    if config.storage_dir is None:
        print("Set PROGRESS_STORAGE_DIR or pass --storage-dir", file=sys.stderr)
        return 2

    reporter = ProgressReporter.from_config(config)

    if args.report:
        try:
            reporter.report(
                args.report,
                {
                    "completed": args.completed,
                    "score": args.score,
                    "stars": args.stars,
                    "badges": args.badge,
                },
            )
        except PersistenceError as exc:
            print(f"Report failed: {exc}", file=sys.stderr)
            return 1

    record = reporter.read()
    summary = reporter.summary()

    if args.json_mode:
        payload = {"record": record.to_storage(), "summary": summary.to_storage()}
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(_render_text(record, summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
