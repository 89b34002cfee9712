"""
scripts/generate_report.py — CLI entry point for one-off report generation.

Usage:
    python scripts/generate_report.py --patient-id 5f0c...e1
    python scripts/generate_report.py --patient-id 5f0c...e1 --out-dir /tmp/reports
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from mindreport.api.deps import get_renderer
from mindreport.config import get_settings
from mindreport.db.session import AsyncSessionLocal, engine
from mindreport.reports.assembler import assemble_report
from mindreport.reports.errors import PatientNotFoundError, RenderError
from mindreport.reports.storage import write_report

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def _generate(patient_id: str, out_dir: Path) -> Path:
    renderer = get_renderer(get_settings())
    try:
        async with AsyncSessionLocal() as session:
            report = await assemble_report(session, patient_id, tz=renderer.tz)
    finally:
        await engine.dispose()
    return write_report(renderer, report, out_dir)


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a patient health report PDF.")
    parser.add_argument("--patient-id", required=True, help="Patient identifier.")
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=None,
        help="Output directory (default: REPORTS_DIR setting).",
    )
    args = parser.parse_args()
    out_dir = args.out_dir or get_settings().reports_dir

    try:
        path = asyncio.run(_generate(args.patient_id, out_dir))
    except PatientNotFoundError:
        logger.error("Patient not found: %s", args.patient_id)
        return 2
    except RenderError as exc:
        logger.error("Report generation failed (%s); target was %s", exc, exc.path)
        return 1

    print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
