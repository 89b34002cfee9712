"""
mindreport/reports/layout.py — Pagination plan for the questionnaire table.

The paginator never draws. It walks a small state machine over the table rows
and returns Placements (what to draw, at which top-down y offset); the PDF
renderer turns each placement into canvas calls. Keeping the plan separate
lets the page-break rules be tested without a rendering backend.

Coordinates are measured from the top of the page, growing downwards.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LayoutState(str, Enum):
    NEED_HEADER = "NEED_HEADER"
    DRAWING_ROW = "DRAWING_ROW"
    NEED_PAGE_BREAK = "NEED_PAGE_BREAK"


class PlacementKind(str, Enum):
    HEADER = "header"
    ROW = "row"
    PAGE_BREAK = "page_break"
    SUMMARY = "summary"


@dataclass(frozen=True)
class Placement:
    kind: PlacementKind
    y: float
    index: int | None = None  # row index for ROW placements


@dataclass(frozen=True)
class TableGeometry:
    page_height: float
    top_margin: float = 50
    bottom_margin: float = 50
    row_height: float = 24
    summary_gap: float = 10
    summary_height: float = 20

    @property
    def bottom_limit(self) -> float:
        return self.page_height - self.bottom_margin


def fits(cursor: float, height: float, bottom_limit: float) -> bool:
    """True when a block of `height` starting at `cursor` ends above the limit."""
    return cursor + height <= bottom_limit


class TablePaginator:
    """
    Plans header, rows and summary line across pages.

    States:
        NEED_HEADER      the header row has not been placed on this table yet
        DRAWING_ROW      the next body row fits at the cursor
        NEED_PAGE_BREAK  the next block would cross the bottom margin

    The header is placed once. With repeat_header=True a page break sends
    the machine back to NEED_HEADER so continuation pages get their own.
    """

    def __init__(self, geometry: TableGeometry, repeat_header: bool = False) -> None:
        self.geometry = geometry
        self.repeat_header = repeat_header

    def plan(self, row_count: int, start_y: float) -> list[Placement]:
        if row_count <= 0:
            return []

        g = self.geometry
        placements: list[Placement] = []
        cursor = start_y
        state = LayoutState.NEED_HEADER
        header_drawn = False
        index = 0

        while index < row_count:
            if state is LayoutState.NEED_PAGE_BREAK:
                placements.append(Placement(PlacementKind.PAGE_BREAK, cursor))
                cursor = g.top_margin
                if self.repeat_header or not header_drawn:
                    state = LayoutState.NEED_HEADER
                else:
                    state = LayoutState.DRAWING_ROW
                continue

            if not fits(cursor, g.row_height, g.bottom_limit) and cursor > g.top_margin:
                state = LayoutState.NEED_PAGE_BREAK
                continue

            if state is LayoutState.NEED_HEADER:
                placements.append(Placement(PlacementKind.HEADER, cursor))
                header_drawn = True
                cursor += g.row_height
                state = LayoutState.DRAWING_ROW
                continue

            placements.append(Placement(PlacementKind.ROW, cursor, index))
            cursor += g.row_height
            index += 1
            state = LayoutState.DRAWING_ROW

        cursor += g.summary_gap
        if not fits(cursor, g.summary_height, g.bottom_limit):
            placements.append(Placement(PlacementKind.PAGE_BREAK, cursor))
            cursor = g.top_margin
        placements.append(Placement(PlacementKind.SUMMARY, cursor))
        return placements
