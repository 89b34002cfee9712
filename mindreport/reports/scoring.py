"""
mindreport/reports/scoring.py — Questionnaire score resolution.

A stored holistic average ("media") always wins over the converted score;
the converted score is only a fallback for questionnaires answered before the
average was persisted.
"""
from __future__ import annotations

from collections.abc import Iterable

from mindreport.reports.models import QuestionnaireResponse


def average_of(questionnaire: QuestionnaireResponse) -> float:
    """Average score out of 10 for one questionnaire."""
    if questionnaire.mean is not None:
        return float(questionnaire.mean)
    # converted_score is already 0.0 when nothing usable was stored
    return float(questionnaire.converted_score)


def overall_average(averages: Iterable[float]) -> float | None:
    """Arithmetic mean of row averages, or None when there are none."""
    values = list(averages)
    if not values:
        return None
    return sum(values) / len(values)


def format_score(value: float) -> str:
    return f"{value:.1f}/10"
