"""mindreport/reports/errors.py — Failures surfaced by the report pipeline."""
from __future__ import annotations

from pathlib import Path


class ReportError(Exception):
    """Base class for report pipeline failures."""


class PatientNotFoundError(ReportError, LookupError):
    """Raised when the aggregation query returns no row for the patient id."""

    def __init__(self, patient_id: str) -> None:
        super().__init__(f"Patient not found: {patient_id}")
        self.patient_id = patient_id


class RenderError(ReportError):
    """Raised when the PDF could not be written to its destination."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path
