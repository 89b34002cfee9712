"""
mindreport/reports/normalize.py — Canonicalization of stored report records.

The aggregation function returns each collection either as a list of JSON
objects, a list of JSON-encoded strings, or free text, depending on how the
rows were written. Every element is classified once into a RawRecord variant
and each variant maps to exactly one canonical shape. Nothing here raises:
malformed input degrades to text, zero, or an empty collection.
"""
from __future__ import annotations

import json
import logging
import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Union

from mindreport.reports.dates import DIARY_DATE_SENTINEL, TABLE_DATE_SENTINEL, format_date
from mindreport.reports.models import DiaryEntry, QuestionnaireResponse

logger = logging.getLogger(__name__)

MISSING_VALUE = "-"


# ─── Raw record variants ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class Structured:
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class EncodedText:
    raw: str
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class PlainText:
    raw: str


@dataclass(frozen=True)
class Other:
    value: Any


RawRecord = Union[Structured, EncodedText, PlainText, Other]


def classify(value: Any) -> RawRecord:
    """Resolve one stored element into its RawRecord variant."""
    if isinstance(value, Mapping):
        return Structured(value)
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except (ValueError, RecursionError):
            return PlainText(value)
        if isinstance(decoded, Mapping):
            return EncodedText(value, decoded)
        return PlainText(value)
    return Other(value)


def as_sequence(value: Any) -> Sequence[Any]:
    """Return the stored collection as a sequence, or () when it is not one."""
    if isinstance(value, (list, tuple)):
        return value
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except (ValueError, RecursionError):
            decoded = None
        if isinstance(decoded, list):
            return decoded
    if value is not None:
        logger.debug("Ignoring non-sequence collection of type %s", type(value).__name__)
    return ()


# ─── Ordered field extraction ─────────────────────────────────────────────────

Extractor = Callable[[Mapping[str, Any]], Any]


def key(name: str) -> Extractor:
    return lambda record: record.get(name)


def serialized(record: Mapping[str, Any]) -> str:
    return json.dumps(record, ensure_ascii=False, default=str)


def first_present(record: Mapping[str, Any], extractors: Sequence[Extractor]) -> Any:
    """Return the first truthy value produced by `extractors`, in order."""
    for extract in extractors:
        value = extract(record)
        if value:
            return value
    return None


DIARY_CONTENT = (key("texto"), key("conteudo"), key("descricao"), serialized)
DIAGNOSIS_TEXT = (key("descricao"), key("texto"), key("diagnostico"), serialized)
QUESTIONNAIRE_ID = (key("questionario_id"), key("id"))


def _text(value: Any) -> str:
    if value is None:
        return MISSING_VALUE
    return value if isinstance(value, str) else str(value)


def to_number(value: Any, default: float | None = 0.0) -> float | None:
    """Numeric cast with a fallback for absent, non-numeric or non-finite values."""
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _fields(raw: RawRecord) -> Mapping[str, Any] | None:
    if isinstance(raw, (Structured, EncodedText)):
        return raw.fields
    return None


# ─── Diaries ──────────────────────────────────────────────────────────────────

def normalize_diaries(value: Any, tz: tzinfo | None = None) -> tuple[DiaryEntry, ...]:
    return tuple(
        _diary_entry(classify(item), position, tz)
        for position, item in enumerate(as_sequence(value), start=1)
    )


def _diary_entry(raw: RawRecord, position: int, tz: tzinfo | None) -> DiaryEntry:
    fields = _fields(raw)
    if fields is not None:
        return DiaryEntry(
            id=fields.get("id") or position,
            date=format_date(fields.get("data_hora"), DIARY_DATE_SENTINEL, tz),
            content=_text(first_present(fields, DIARY_CONTENT)),
        )
    content = raw.raw if isinstance(raw, PlainText) else _text(raw.value)
    return DiaryEntry(id=position, date=DIARY_DATE_SENTINEL, content=content)


# ─── Questionnaires ───────────────────────────────────────────────────────────

def normalize_questionnaires(
    value: Any, tz: tzinfo | None = None
) -> tuple[QuestionnaireResponse, ...]:
    return tuple(
        _questionnaire(classify(item), position, tz)
        for position, item in enumerate(as_sequence(value), start=1)
    )


def _questionnaire(raw: RawRecord, position: int, tz: tzinfo | None) -> QuestionnaireResponse:
    fields = _fields(raw)
    if fields is None:
        fields = {"texto": raw.raw} if isinstance(raw, PlainText) else {}

    text = fields.get("texto")
    return QuestionnaireResponse(
        id=first_present(fields, QUESTIONNAIRE_ID) or position,
        date=format_date(fields.get("data"), TABLE_DATE_SENTINEL, tz),
        score=to_number(fields.get("pontuacao")),
        converted_score=to_number(fields.get("nota_convertida")),
        mean=to_number(fields.get("media"), default=None),
        text=_text(text) if text else "",
    )


# ─── Diagnoses ────────────────────────────────────────────────────────────────

def normalize_diagnoses(value: Any) -> tuple[str, ...]:
    return tuple(_diagnosis(classify(item)) for item in as_sequence(value))


def _diagnosis(raw: RawRecord) -> str:
    fields = _fields(raw)
    if fields is not None:
        return _text(first_present(fields, DIAGNOSIS_TEXT))
    if isinstance(raw, PlainText):
        return raw.raw
    return _text(raw.value)
