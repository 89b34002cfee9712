"""
mindreport/api/deps.py — FastAPI shared dependencies.

Centralizes:
- Rate limiter
- Database session
- Report renderer built from settings
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Depends
from slowapi import Limiter
from slowapi.util import get_remote_address

from mindreport.config import Settings, get_settings
from mindreport.db.session import get_db  # noqa: F401  (re-exported for routers)
from mindreport.reports.pdf import ReportRenderer

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)


@lru_cache(maxsize=8)
def report_timezone(name: str) -> ZoneInfo | None:
    """Resolve the display timezone, or None (no conversion) if unknown."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown report timezone %r; dates are shown as stored", name)
        return None


def get_renderer(settings: Annotated[Settings, Depends(get_settings)]) -> ReportRenderer:
    return ReportRenderer(
        logo_path=settings.logo_path,
        brand_name=settings.brand_name,
        tz=report_timezone(settings.report_timezone),
        repeat_table_header=settings.report_repeat_table_header,
    )
