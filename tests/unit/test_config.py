"""
tests/unit/test_config.py — Unit tests for derived settings.
"""
from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from mindreport.config import Settings


class TestReportRetention:
    def test_default_keeps_one_day(self):
        assert Settings().report_retention == timedelta(hours=24)

    def test_zero_disables_pruning(self):
        assert Settings(report_retention_hours=0).report_retention is None

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            Settings(report_retention_hours=-1)
