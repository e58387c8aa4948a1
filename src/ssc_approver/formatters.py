"""Output formatters for CLI.

Table, JSON and CSV renderings of SSC resources. File sizes stay in bytes on
the models; megabytes are computed here.
"""

from __future__ import annotations

import csv
from datetime import datetime
import io
import json
import textwrap

import click

from .messages import extract_messages
from .models import Artifact, Project, ProjectVersion

PENDING_LABEL = "Requires Approval"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DETAIL_COLUMN_WIDTH = 50
DESCRIPTION_WIDTH = 50

_OK_STATUSES = {"PROCESSED", "Complete"}


def format_json(data) -> str:
    """Full JSON passthrough."""
    return json.dumps(data, indent=2)


def format_size_mb(size_bytes: int) -> str:
    return f"{size_bytes / (1024 * 1024):.2f}"


def format_upload_date(value: datetime | None) -> str:
    if value is None:
        return ""
    return value.strftime(DATE_FORMAT)


# ---------------------------------------------------------------------------
# Table rendering
# ---------------------------------------------------------------------------

def _cell_lines(cell: str, wrap_width: int | None) -> list[str]:
    lines = []
    for raw in str(cell).split("\n"):
        if wrap_width and len(click.unstyle(raw)) > wrap_width:
            lines.extend(textwrap.wrap(raw, wrap_width) or [""])
        else:
            lines.append(raw)
    return lines or [""]


def _pad(text: str, width: int) -> str:
    # Width ignores ANSI colour codes
    return text + " " * (width - len(click.unstyle(text)))


def render_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    wrap_width: int | None = None,
    row_lines: bool = False,
) -> str:
    """Render a bordered plain-text table. Cells may span several lines."""
    split_rows = [[_cell_lines(cell, wrap_width) for cell in row] for row in rows]
    widths = [len(h) for h in headers]
    for row in split_rows:
        for idx, cell in enumerate(row):
            widths[idx] = max([widths[idx]] + [len(click.unstyle(line)) for line in cell])

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def _line(values: list[str]) -> str:
        return "| " + " | ".join(_pad(v, w) for v, w in zip(values, widths)) + " |"

    out = [border, _line(headers), border]
    for row_idx, row in enumerate(split_rows):
        height = max(len(cell) for cell in row)
        for offset in range(height):
            out.append(_line([cell[offset] if offset < len(cell) else "" for cell in row]))
        if row_lines and row_idx < len(split_rows) - 1:
            out.append(border)
    out.append(border)
    return "\n".join(out)


# ---------------------------------------------------------------------------
# Artifacts requiring approval
# ---------------------------------------------------------------------------

def format_approval_table(artifacts: list[Artifact], details: bool = False) -> str:
    last_header = "Processing Messages" if details else "Status"
    headers = ["Project", "Upload Date", "File Name", "Size (MB)", "Upload IP", last_header]
    rows = []
    for a in artifacts:
        rows.append(
            [
                a.project_version_name or "",
                format_upload_date(a.upload_date),
                a.file_name,
                format_size_mb(a.file_size),
                a.upload_ip,
                extract_messages(a) if details else PENDING_LABEL,
            ]
        )
    if details:
        return render_table(headers, rows, wrap_width=DETAIL_COLUMN_WIDTH, row_lines=True)
    return render_table(headers, rows)


def approval_records(artifacts: list[Artifact], details: bool = False) -> list[dict]:
    records = []
    for a in artifacts:
        record = {
            "project": a.project_version_name or "",
            "upload_date": format_upload_date(a.upload_date),
            "file_name": a.file_name,
            "file_size_bytes": a.file_size,
            "file_size_mb": format_size_mb(a.file_size),
            "upload_ip": a.upload_ip,
            "status": PENDING_LABEL,
        }
        if details:
            record["messages"] = extract_messages(a)
        records.append(record)
    return records


def format_approval_json(artifacts: list[Artifact], details: bool = False) -> str:
    return format_json(approval_records(artifacts, details))


def format_approval_csv(artifacts: list[Artifact]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["Project", "Upload Date", "File Name", "Size (bytes)", "Size (MB)", "Upload IP", "Messages"])
    for a in artifacts:
        writer.writerow(
            [
                a.project_version_name or "",
                format_upload_date(a.upload_date),
                a.file_name,
                a.file_size,
                format_size_mb(a.file_size),
                a.upload_ip,
                extract_messages(a),
            ]
        )
    return buf.getvalue().rstrip("\n")


# ---------------------------------------------------------------------------
# Projects / versions
# ---------------------------------------------------------------------------

def _truncate(text: str, width: int) -> str:
    if len(text) > width:
        return text[: width - 3] + "..."
    return text


def format_projects_table(projects: list[Project]) -> str:
    rows = [[str(p.id), p.name, _truncate(p.description, DESCRIPTION_WIDTH)] for p in projects]
    return render_table(["ID", "Name", "Description"], rows)


def format_versions_table(versions: list[ProjectVersion]) -> str:
    return render_table(["ID", "Name"], [[str(v.id), v.name] for v in versions])


# ---------------------------------------------------------------------------
# Artifacts of one version
# ---------------------------------------------------------------------------

def _styled_status(artifact: Artifact) -> str:
    if artifact.requires_approval:
        return click.style(artifact.status, fg="red")
    if artifact.status in _OK_STATUSES:
        return click.style(artifact.status, fg="green")
    return artifact.status


def format_version_artifacts_table(artifacts: list[Artifact]) -> str:
    rows = []
    for a in artifacts:
        rows.append(
            [
                str(a.id),
                a.file_name,
                _styled_status(a),
                format_upload_date(a.upload_date),
                format_size_mb(a.file_size),
                a.upload_ip,
            ]
        )
    return render_table(["ID", "File Name", "Status", "Upload Date", "Size (MB)", "Upload IP"], rows)


def format_artifact_detail(artifact: Artifact) -> str:
    lines = [
        f"Artifact {artifact.id}: {artifact.file_name}",
        f"  Status:       {_styled_status(artifact)}",
        f"  Type:         {artifact.artifact_type}",
        f"  Uploaded:     {format_upload_date(artifact.upload_date)} by {artifact.user_name or '?'} from {artifact.upload_ip or '?'}",
        f"  Size:         {format_size_mb(artifact.file_size)} MB ({artifact.file_size} bytes)",
    ]
    if artifact.project_version_id is not None:
        lines.append(f"  Version ID:   {artifact.project_version_id}")
    if artifact.approval_comment:
        lines.append(f"  Comment:      {artifact.approval_comment}")
    lines.append("")
    lines.append("Processing messages:")
    lines.extend(f"  {line}" for line in extract_messages(artifact).split("\n"))
    return "\n".join(lines)
