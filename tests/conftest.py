"""
tests/conftest.py — Shared pytest fixtures for unit and integration tests.
"""
from __future__ import annotations

import io
from typing import Any

import pytest
from pypdf import PdfReader

from mindreport.config import PACKAGE_DIR
from mindreport.reports.pdf import ReportRenderer

LOGO_PATH = PACKAGE_DIR / "assets" / "logo.png"


class FakeResult:
    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self._rows = rows

    def mappings(self) -> "FakeResult":
        return self

    def all(self) -> list[dict[str, Any]]:
        return list(self._rows)


class FakeSession:
    """Stands in for AsyncSession; records every statement it executes."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, error: Exception | None = None) -> None:
        self.rows = rows or []
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def execute(self, statement: Any, params: dict[str, Any] | None = None) -> FakeResult:
        self.calls.append((str(statement), params or {}))
        if self.error is not None:
            raise self.error
        return FakeResult(self.rows)


def pdf_pages(data: bytes) -> list[str]:
    """Extracted text of each page of a PDF."""
    reader = PdfReader(io.BytesIO(data))
    return [page.extract_text() or "" for page in reader.pages]


@pytest.fixture
def patient_row() -> dict[str, Any]:
    """One row as returned by relatorio_usuario(), mixing storage encodings."""
    return {
        "usuario_nome": "Maria Silva",
        "usuario_email": "m@x.com",
        "usuario_data_nascimento": "1990-05-20",
        "diarios": [
            {"id": 7, "data_hora": "2024-01-01", "texto": "ok"},
            '{"data_hora": "2024-02-03T10:15:00.000Z", "conteudo": "slept badly"}',
            "written without structure",
        ],
        "questionarios": [
            {"questionario_id": 11, "data": "2025-11-12T00:00:00.000Z", "media": 8, "nota_convertida": 2},
            '{"id": 12, "data": "2025-11-13", "pontuacao": "14", "nota_convertida": 6}',
            {"data": None, "media": 10},
        ],
        "diagnosticos": [{"descricao": "Generalized anxiety"}, "Insomnia"],
    }


@pytest.fixture
def renderer() -> ReportRenderer:
    return ReportRenderer(logo_path=LOGO_PATH)
