"""Report output for batch runs."""

from __future__ import annotations

import json
from pathlib import Path

from screentest.models.test_result import RunResult


def format_failure_report(run_result: RunResult) -> str:
    """Render failing tests grouped by script.

    Each script with failures gets a header naming the script and the
    directory holding its diff artifacts, then one line per failing test.
    Scripts where everything passed are omitted.
    """
    lines: list[str] = []
    for script in run_result.script_results:
        failures = script.failures
        if not failures:
            continue
        lines.append(script.script)
        lines.append(f"inspect diffs at {script.output_dir}")
        for r in failures:
            lines.append(f"{r.test_name}: {r.failure_reason}")
    return "\n".join(lines)


def generate_json_report(run_result: RunResult, output_path: Path) -> None:
    """Write a machine-readable JSON report."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(run_result.model_dump(), f, indent=2, default=str)
