"""
mindreport/reports/models.py — Canonical report model.

Built once by the assembler and read by the renderer; every value is frozen
and every collection is a tuple so a report cannot be mutated after assembly.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Union

RawDate = Union[date, datetime, str, None]


@dataclass(frozen=True)
class PatientIdentity:
    name: str | None = None
    email: str | None = None
    birth_date: RawDate = None  # formatted at render time


@dataclass(frozen=True)
class DiaryEntry:
    id: int | str
    date: str       # DD/MM/YYYY or sentinel
    content: str


@dataclass(frozen=True)
class QuestionnaireResponse:
    id: int | str
    date: str       # DD/MM/YYYY or "-"
    score: float = 0.0
    converted_score: float = 0.0
    mean: float | None = None   # pre-computed average, when stored
    text: str = ""


@dataclass(frozen=True)
class Report:
    identity: PatientIdentity
    diaries: tuple[DiaryEntry, ...] = field(default_factory=tuple)
    questionnaires: tuple[QuestionnaireResponse, ...] = field(default_factory=tuple)
    diagnoses: tuple[str, ...] = field(default_factory=tuple)
