"""JSON export of a batch test result.

Stable, sorted output so reports can be diffed between runs and consumed by
CI tooling.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from core.domain.models import TestBatchResult


def export_test_result_json(*, result: TestBatchResult, output_path: Path) -> Path:
    """Write `result` as UTF-8 JSON and return the path written."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = result.model_dump(mode="json")
    payload["passed"] = result.passed
    payload["failed"] = result.failed
    payload["ok"] = result.ok
    payload["generated_at"] = datetime.now(timezone.utc).isoformat(timespec="seconds")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
