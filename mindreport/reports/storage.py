"""
mindreport/reports/storage.py — Output files for rendered reports.

The download name only depends on the patient's display name, so on disk
every report gets a UTC timestamp and a random token as well: two requests
for patients with the same name never write to the same file.

Reports are rendered to a ".part" file and renamed once complete, so a file
at its final path is always a finished document.

The reports directory is shared with the user (~/Downloads by default), so
retention only ever touches files carrying this module's exact naming.
"""
from __future__ import annotations

import logging
import os
import re
import secrets
from datetime import datetime, timedelta, timezone
from pathlib import Path

from mindreport.reports.errors import RenderError
from mindreport.reports.models import Report
from mindreport.reports.pdf import ReportRenderer

logger = logging.getLogger(__name__)

DEFAULT_NAME = "patient"
STAMP_FORMAT = "%Y%m%dT%H%M%SZ"

_WHITESPACE = re.compile(r"\s+")
_UNSAFE_PATH_CHARS = re.compile(r"[\\/:*?\"<>|\x00-\x1f]")
_REPORT_FILE = re.compile(r"^Report-.+-(\d{8}T\d{6}Z)-[0-9a-f]{8}\.pdf(?:\.part)?$")


def _display_name(name: str | None) -> str:
    display = (name or "").strip() or DEFAULT_NAME
    return _WHITESPACE.sub("_", display)


def download_filename(name: str | None) -> str:
    """Filename offered to the user agent, e.g. "Report-Maria_Silva.pdf"."""
    return f"Report-{_display_name(name)}.pdf"


def report_output_path(directory: Path, name: str | None, now: datetime | None = None) -> Path:
    """Unique on-disk path for one report of the given patient."""
    now = now or datetime.now(tz=timezone.utc)
    safe = _UNSAFE_PATH_CHARS.sub("_", _display_name(name))
    stamp = now.astimezone(timezone.utc).strftime(STAMP_FORMAT)
    return directory / f"Report-{safe}-{stamp}-{secrets.token_hex(4)}.pdf"


def _written_at(path: Path) -> datetime | None:
    match = _REPORT_FILE.match(path.name)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), STAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def prune_reports(directory: Path, max_age: timedelta, now: datetime | None = None) -> int:
    """
    Delete generated reports in `directory` older than `max_age`.

    The age comes from the timestamp in the file name. Files that were not
    named by report_output_path() are never touched, and a file that cannot
    be removed is logged and skipped.

    Returns:
        Number of files deleted.
    """
    now = now or datetime.now(tz=timezone.utc)
    cutoff = now - max_age
    removed = 0
    for path in directory.iterdir():
        written_at = _written_at(path)
        if written_at is None or written_at >= cutoff or not path.is_file():
            continue
        try:
            path.unlink()
        except OSError as exc:
            logger.warning("Could not remove expired report %s: %s", path, exc)
            continue
        removed += 1

    if removed:
        logger.info("Removed %d expired report(s) from %s", removed, directory)
    return removed


def write_report(
    renderer: ReportRenderer,
    report: Report,
    directory: Path,
    retention: timedelta | None = None,
) -> Path:
    """
    Render `report` into `directory` and return the finished file's path.

    When `retention` is given, reports older than it are pruned from the
    directory after a successful write.

    Raises:
        RenderError: If the directory is not writable or rendering fails.
            The partial file is removed before raising.
    """
    path = report_output_path(directory, report.identity.name)
    partial = path.with_name(path.name + ".part")
    try:
        directory.mkdir(parents=True, exist_ok=True)
        with partial.open("wb") as sink:
            renderer.render(report, sink)
        os.replace(partial, path)
    except Exception as exc:
        if partial.exists():
            partial.unlink()
        raise RenderError(f"Could not write report: {exc}", path=path) from exc

    logger.info("Report written to %s", path)
    if retention is not None:
        prune_reports(directory, retention)
    return path
