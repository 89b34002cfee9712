"""
mindreport/reports/pdf.py — PDF layout for patient health reports.

Draws a Report onto a ReportLab canvas:
- header with branding, title and patient identity
- diaries and diagnoses as free-flowing text (wrapped, automatic page breaks)
- questionnaires as a striped table paginated by TablePaginator, followed by
  the overall average line
"""
from __future__ import annotations

import logging
from datetime import tzinfo
from pathlib import Path
from typing import BinaryIO, Union

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from mindreport.reports.dates import HEADER_DATE_SENTINEL, format_date
from mindreport.reports.layout import (
    Placement,
    PlacementKind,
    TableGeometry,
    TablePaginator,
    fits,
)
from mindreport.reports.models import QuestionnaireResponse, Report
from mindreport.reports.scoring import average_of, format_score, overall_average

logger = logging.getLogger(__name__)

RenderTarget = Union[str, Path, BinaryIO]

PAGE_SIZE = LETTER
MARGIN = 50

LOGO_X = 90
LOGO_SIZE = 60

ACCENT = colors.HexColor("#051885")
ZEBRA_EVEN = colors.HexColor("#F3F4F6")
ZEBRA_ODD = colors.HexColor("#E0E7EF")

COLUMN_WIDTHS = (120, 180, 150)
COLUMN_TITLES = ("No.", "Date", "Average score")
ROW_HEIGHT = 24

NO_NAME = "No name"
NO_EMAIL = "No e-mail"
NO_DIARIES = "No diary entries registered."
NO_DIAGNOSES = "No diagnoses registered."
NO_QUESTIONNAIRES = "No questionnaires answered."

# Line height as a multiple of the font size
LEADING = 1.2


class _TextFlow:
    """Top-down text cursor that wraps lines and starts new pages on overflow."""

    def __init__(self, pdf: canvas.Canvas, page_size: tuple[float, float], margin: float) -> None:
        self.pdf = pdf
        self.page_width, self.page_height = page_size
        self.margin = margin
        self.y = margin

    @property
    def width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def bottom_limit(self) -> float:
        return self.page_height - self.margin

    def new_page(self) -> None:
        self.pdf.showPage()
        self.y = self.margin

    def move_down(self, lines: float = 1.0, size: float = 12) -> None:
        self.y += lines * size * LEADING

    def write(
        self,
        text: str,
        font: str = "Times-Roman",
        size: float = 12,
        indent: float = 0,
        align: str = "left",
        color: colors.Color = colors.black,
    ) -> None:
        width = self.width - indent
        leading = size * LEADING
        for line in simpleSplit(text, font, size, width) or [""]:
            if not fits(self.y, leading, self.bottom_limit):
                self.new_page()
            baseline = self.page_height - self.y - size
            self.pdf.setFont(font, size)
            self.pdf.setFillColor(color)
            if align == "center":
                self.pdf.drawCentredString(self.margin + indent + width / 2, baseline, line)
            else:
                self.pdf.drawString(self.margin + indent, baseline, line)
            self.y += leading


class ReportRenderer:
    """
    Renders one Report into one PDF document.

    A renderer holds configuration only; every render() call builds its own
    canvas, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        logo_path: Path | None = None,
        brand_name: str = "MindTracking",
        tz: tzinfo | None = None,
        repeat_table_header: bool = False,
    ) -> None:
        self.logo_path = logo_path
        self.brand_name = brand_name
        self.tz = tz
        self.repeat_table_header = repeat_table_header

    def render(self, report: Report, target: RenderTarget) -> int:
        """Draw `report` and save it to `target`. Returns the page count."""
        pdf = canvas.Canvas(str(target) if isinstance(target, Path) else target, pagesize=PAGE_SIZE)
        pdf.setTitle(f"{self.brand_name} health report")
        pdf.setAuthor(self.brand_name)

        flow = _TextFlow(pdf, PAGE_SIZE, MARGIN)
        self._draw_header(flow, report)
        self._draw_diaries(flow, report)
        flow.move_down()
        self._draw_diagnoses(flow, report)
        flow.move_down()
        self._draw_questionnaires(flow, report.questionnaires)

        pages = pdf.getPageNumber()
        pdf.save()
        logger.info("Rendered report with %d page(s)", pages)
        return pages

    # ── Header ────────────────────────────────────────────────────────────────

    def _draw_header(self, flow: _TextFlow, report: Report) -> None:
        if self.logo_path is not None:
            flow.pdf.drawImage(
                str(self.logo_path),
                LOGO_X,
                flow.page_height - flow.y - LOGO_SIZE,
                width=LOGO_SIZE,
                height=LOGO_SIZE,
                mask="auto",
            )

        flow.write("Health Report Generated by", font="Times-Bold", size=20, align="center")
        flow.write(self.brand_name, font="Times-Bold", size=20, align="center")
        flow.move_down(2, size=20)

        identity = report.identity
        birth_date = format_date(identity.birth_date, HEADER_DATE_SENTINEL, self.tz)
        flow.write(f"Name: {identity.name or NO_NAME}")
        flow.write(f"E-mail: {identity.email or NO_EMAIL}")
        flow.write(f"Date of birth: {birth_date}")
        flow.move_down(1.5)

        flow.write("Report", font="Courier", size=16, align="center")
        flow.move_down(size=16)

    # ── Free-text sections ────────────────────────────────────────────────────

    def _draw_diaries(self, flow: _TextFlow, report: Report) -> None:
        flow.write("Diaries", size=14)
        flow.move_down(0.5, size=14)
        if not report.diaries:
            flow.write(NO_DIARIES, indent=20)
            return
        for position, entry in enumerate(report.diaries, start=1):
            flow.write(f"Diary {position} - {entry.date}:")
            flow.write(entry.content, indent=20)
            flow.move_down(0.5)

    def _draw_diagnoses(self, flow: _TextFlow, report: Report) -> None:
        flow.write("Diagnoses", size=14)
        flow.move_down(0.5, size=14)
        if not report.diagnoses:
            flow.write(NO_DIAGNOSES, indent=20)
            return
        for diagnosis in report.diagnoses:
            flow.write(diagnosis, indent=20)

    # ── Questionnaire table ───────────────────────────────────────────────────

    def _draw_questionnaires(
        self, flow: _TextFlow, questionnaires: tuple[QuestionnaireResponse, ...]
    ) -> None:
        flow.write("Answered questionnaires", size=14, align="center")
        flow.move_down(0.5, size=14)
        if not questionnaires:
            flow.write(NO_QUESTIONNAIRES, align="center")
            return

        table = _TableDrawer(flow.pdf, flow.page_width, flow.page_height)
        geometry = TableGeometry(
            page_height=flow.page_height,
            top_margin=MARGIN,
            bottom_margin=MARGIN,
            row_height=ROW_HEIGHT,
        )
        paginator = TablePaginator(geometry, repeat_header=self.repeat_table_header)
        averages: list[float] = []

        for placement in paginator.plan(len(questionnaires), flow.y):
            if placement.kind is PlacementKind.PAGE_BREAK:
                flow.pdf.showPage()
            elif placement.kind is PlacementKind.HEADER:
                table.header(placement.y)
            elif placement.kind is PlacementKind.ROW:
                average = average_of(questionnaires[placement.index])
                averages.append(average)
                table.row(placement, questionnaires[placement.index].date, average)
            elif placement.kind is PlacementKind.SUMMARY:
                overall = overall_average(averages)
                table.summary(placement.y, f"Overall average: {format_score(overall)}")
            flow.y = placement.y + ROW_HEIGHT


class _TableDrawer:
    """Canvas calls for the questionnaire table, in top-down coordinates."""

    def __init__(self, pdf: canvas.Canvas, page_width: float, page_height: float) -> None:
        self.pdf = pdf
        self.page_height = page_height
        self.total_width = sum(COLUMN_WIDTHS)
        self.start_x = (page_width - self.total_width) / 2

    def _column_x(self, column: int) -> float:
        return self.start_x + sum(COLUMN_WIDTHS[:column])

    def _bottom(self, y: float) -> float:
        return self.page_height - y - ROW_HEIGHT

    def _cells(self, y: float, texts: tuple[str, ...], font: str, color: colors.Color) -> None:
        baseline = self.page_height - (y + ROW_HEIGHT / 2 + 12 * 0.35)
        self.pdf.setFont(font, 12)
        self.pdf.setFillColor(color)
        for column, text in enumerate(texts):
            center = self._column_x(column) + COLUMN_WIDTHS[column] / 2
            self.pdf.drawCentredString(center, baseline, text)

    def header(self, y: float) -> None:
        self.pdf.setFillColor(ACCENT)
        for column, width in enumerate(COLUMN_WIDTHS):
            self.pdf.rect(self._column_x(column), self._bottom(y), width, ROW_HEIGHT, stroke=0, fill=1)
        self._cells(y, COLUMN_TITLES, "Times-Bold", colors.white)
        self.pdf.setLineWidth(1)
        self.pdf.setStrokeColor(colors.black)
        self.pdf.rect(self.start_x, self._bottom(y), self.total_width, ROW_HEIGHT, stroke=1, fill=0)

    def row(self, placement: Placement, date: str, average: float) -> None:
        y = placement.y
        self.pdf.setFillColor(ZEBRA_EVEN if placement.index % 2 == 0 else ZEBRA_ODD)
        self.pdf.rect(self.start_x, self._bottom(y), self.total_width, ROW_HEIGHT, stroke=0, fill=1)
        self._cells(
            y,
            (f"#{placement.index + 1}", date, format_score(average)),
            "Times-Roman",
            colors.black,
        )
        self.pdf.setStrokeColor(colors.black)
        for column, width in enumerate(COLUMN_WIDTHS):
            self.pdf.rect(self._column_x(column), self._bottom(y), width, ROW_HEIGHT, stroke=1, fill=0)

    def summary(self, y: float, text: str) -> None:
        self.pdf.setFont("Times-Roman", 13)
        self.pdf.setFillColor(ACCENT)
        self.pdf.drawCentredString(
            self.start_x + self.total_width / 2, self.page_height - y - 13, text
        )
