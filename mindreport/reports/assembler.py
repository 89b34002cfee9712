"""
mindreport/reports/assembler.py — Builds a Report from the aggregation query.

One round trip per report: relatorio_usuario(id) returns at most one row with
the patient's identity and the three raw collections, which are handed to the
normalizer. No retries and no caching.
"""
from __future__ import annotations

import logging
from datetime import tzinfo

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from mindreport.reports.errors import PatientNotFoundError
from mindreport.reports.models import PatientIdentity, Report
from mindreport.reports.normalize import (
    normalize_diagnoses,
    normalize_diaries,
    normalize_questionnaires,
)

logger = logging.getLogger(__name__)

REPORT_QUERY = text("SELECT * FROM relatorio_usuario(:patient_id)")


async def assemble_report(
    session: AsyncSession,
    patient_id: str,
    tz: tzinfo | None = None,
) -> Report:
    """
    Fetch and normalize everything a patient report needs.

    Raises:
        PatientNotFoundError: If the query returns no row for `patient_id`.
    """
    result = await session.execute(REPORT_QUERY, {"patient_id": patient_id})
    rows = result.mappings().all()
    logger.debug("Report query for patient %s returned %d row(s)", patient_id, len(rows))
    if not rows:
        raise PatientNotFoundError(patient_id)

    row = rows[0]
    return Report(
        identity=PatientIdentity(
            name=row.get("usuario_nome"),
            email=row.get("usuario_email"),
            birth_date=row.get("usuario_data_nascimento"),
        ),
        diaries=normalize_diaries(row.get("diarios"), tz),
        questionnaires=normalize_questionnaires(row.get("questionarios"), tz),
        diagnoses=normalize_diagnoses(row.get("diagnosticos")),
    )
