"""
mindreport/api/routers/reports.py — Patient PDF report endpoint.

GET /{patient_id} assembles the patient's report, renders it into the
reports directory and streams it back as a download.
"""
from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse, JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from mindreport.api.deps import get_db, get_renderer, limiter
from mindreport.config import Settings, get_settings
from mindreport.reports.assembler import assemble_report
from mindreport.reports.errors import PatientNotFoundError, RenderError
from mindreport.reports.pdf import ReportRenderer
from mindreport.reports.storage import download_filename, write_report

logger = structlog.get_logger()
router = APIRouter()


def _internal_error(settings: Settings, message: str, exc: Exception, **extra: Any) -> HTTPException:
    detail: dict[str, Any] = {"message": message, **extra}
    if not settings.is_production:
        detail["error"] = str(exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def _deliver(path: Path, filename: str) -> Response:
    """Stream the written report, or point at it if it cannot be opened."""
    try:
        with path.open("rb"):
            pass
    except OSError as exc:
        logger.warning("event", message="Report delivery failed", path=str(path), error=str(exc))
        return JSONResponse(
            {
                "success": False,
                "message": "Download failed; the report was generated at:",
                "path": str(path),
            }
        )

    return FileResponse(
        path,
        media_type="application/pdf",
        filename=filename,
        headers={"Cache-Control": "no-store"},
    )


@router.get("/{patient_id}", response_class=FileResponse)
@limiter.limit(get_settings().rate_limit_reports)
async def generate_report(
    request: Request,
    patient_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    renderer: Annotated[ReportRenderer, Depends(get_renderer)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    """
    Generate the PDF health report for a patient.

    Returns the PDF as an attachment named Report-<Patient_Name>.pdf,
    404 when the patient does not exist, 500 when the report cannot be built.
    """
    try:
        report = await assemble_report(db, patient_id, tz=renderer.tz)
    except PatientNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found.")
    except Exception as exc:
        logger.error("event", message="Report assembly failed", patient_id=patient_id, exc_info=True)
        raise _internal_error(settings, "Internal server error", exc) from exc

    try:
        path = await run_in_threadpool(
            write_report, renderer, report, settings.reports_dir, settings.report_retention
        )
    except RenderError as exc:
        logger.error("event", message="Report rendering failed", patient_id=patient_id, exc_info=True)
        raise _internal_error(
            settings, "Report generation failed", exc, path=str(exc.path)
        ) from exc

    logger.info("event", message="Report generated", patient_id=patient_id, path=str(path))
    return _deliver(path, download_filename(report.identity.name))
