"""HTML export of a batch test result.

Why in adapters:
- HTML rendering is an infrastructure detail (Jinja2 templates on disk).
- The core only knows the `TestBatchResult` aggregate.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.domain.models import TestBatchResult

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def render_test_result_html(*, result: TestBatchResult, project_name: str) -> str:
    generated_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
    template = _get_env().get_template("test_report.html")
    return template.render(
        project_name=project_name,
        generated_at=generated_at,
        result=result,
        passed_count=len(result.passed),
        failed_count=len(result.failed),
    )


def export_test_result_html(*, result: TestBatchResult, project_name: str, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    html = render_test_result_html(result=result, project_name=project_name)
    output_path.write_text(html, encoding="utf-8")
    return output_path
