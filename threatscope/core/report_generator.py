"""
Rendering of DLL analysis reports as JSON or plain text.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Dict, List

from .dll_analyzer import FileReport
from ..utils.helpers import format_bytes
from .. import __version__


def build_document(reports: List[FileReport]) -> Dict:
    """Wrap file reports in a top-level document with run metadata."""
    return {
        "generator": f"threatscope {__version__}",
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "files_analyzed": len(reports),
        "files_failed": sum(1 for r in reports if not r.ok),
        "reports": [r.to_dict() for r in reports],
    }


def render_json(reports: List[FileReport], indent: int = 2) -> str:
    return json.dumps(build_document(reports), indent=indent, default=str)


def render_text(reports: List[FileReport]) -> str:
    """Human-readable report, one block per file."""
    blocks = [_render_file(report) for report in reports]
    failed = sum(1 for r in reports if not r.ok)
    blocks.append(f"{len(reports)} file(s) analyzed, {failed} failed.")
    return "\n\n".join(blocks)


def _render_file(report: FileReport) -> str:
    lines = [f"== {report.file_path}"]

    if report.file_info:
        lines.append(
            f"   Size: {format_bytes(report.file_info.file_size)}  "
            f"Type: {report.file_info.file_type}"
        )
    if report.sha256:
        lines.append(f"   SHA-256: {report.sha256}")

    if report.error is not None:
        lines.append(f"   Error: {report.error.message}")
        return "\n".join(lines)

    result = report.result
    lines.append(f"   Summary: {result.analysis_summary}")
    lines.append(
        f"   Potentially suspicious DLLs ({len(result.potentially_suspicious_dlls)} found)"
    )
    for detection in result.detections:
        reason = detection.category or "unusual name"
        lines.append(f"     ! {detection.name}  [{reason}]")

    return "\n".join(lines)
