"""
tests/unit/test_normalize.py — Unit tests for record normalization.

Normalization must never raise: every malformed input maps to a canonical
record or an empty collection.
"""
from __future__ import annotations

import json

import pytest

from mindreport.reports.dates import DIARY_DATE_SENTINEL
from mindreport.reports.models import DiaryEntry, QuestionnaireResponse
from mindreport.reports.normalize import (
    EncodedText,
    Other,
    PlainText,
    Structured,
    as_sequence,
    classify,
    first_present,
    key,
    normalize_diagnoses,
    normalize_diaries,
    normalize_questionnaires,
    to_number,
)

# Deep enough to exhaust the JSON decoder's recursion limit
DEEPLY_NESTED = "[" * 100000

MALFORMED_COLLECTIONS = [
    None, 42, "not json", '{"a": 1}', {"texto": "x"}, 3.5, b"bytes",
    pytest.param(DEEPLY_NESTED, id="deeply-nested-json"),
]
MALFORMED_ELEMENTS = [
    None, 0, 12.5, True, "", "{broken", "[1, 2]", '"quoted"', ["nested"], {},
    pytest.param(DEEPLY_NESTED, id="deeply-nested-json"),
]


class TestClassify:
    def test_mapping_is_structured(self):
        assert classify({"texto": "a"}) == Structured({"texto": "a"})

    def test_json_object_string_is_encoded_text(self):
        raw = '{"texto": "a"}'
        assert classify(raw) == EncodedText(raw, {"texto": "a"})

    @pytest.mark.parametrize("raw", ["plain words", "{broken", "[1, 2]", "17", '"quoted"'])
    def test_other_strings_are_plain_text(self, raw):
        assert classify(raw) == PlainText(raw)

    def test_deeply_nested_json_is_plain_text(self):
        assert classify(DEEPLY_NESTED) == PlainText(DEEPLY_NESTED)

    @pytest.mark.parametrize("value", [None, 3, 2.5, ["a"]])
    def test_anything_else_is_other(self, value):
        assert classify(value) == Other(value)


class TestCollections:
    @pytest.mark.parametrize("value", MALFORMED_COLLECTIONS)
    def test_non_sequences_become_empty(self, value):
        assert as_sequence(value) == ()
        assert normalize_diaries(value) == ()
        assert normalize_questionnaires(value) == ()
        assert normalize_diagnoses(value) == ()

    def test_json_array_string_is_decoded(self):
        assert normalize_diagnoses('["Insomnia"]') == ("Insomnia",)

    def test_tuples_accepted(self):
        assert normalize_diagnoses(("a", "b")) == ("a", "b")


class TestFirstPresent:
    def test_priority_order_respected(self):
        record = {"b": "second", "a": "first"}
        assert first_present(record, (key("a"), key("b"))) == "first"

    def test_empty_values_skipped(self):
        record = {"a": "", "b": None, "c": "third"}
        assert first_present(record, (key("a"), key("b"), key("c"))) == "third"

    def test_nothing_present(self):
        assert first_present({}, (key("a"),)) is None


class TestDiaries:
    def test_structured_record(self):
        (entry,) = normalize_diaries([{"id": 7, "data_hora": "2024-01-01", "texto": "ok"}])
        assert entry == DiaryEntry(id=7, date="01/01/2024", content="ok")

    def test_id_defaults_to_position(self):
        entries = normalize_diaries([{"texto": "a"}, {"texto": "b"}])
        assert [e.id for e in entries] == [1, 2]

    @pytest.mark.parametrize("record,expected", [
        ({"texto": "t", "conteudo": "c", "descricao": "d"}, "t"),
        ({"conteudo": "c", "descricao": "d"}, "c"),
        ({"texto": "", "descricao": "d"}, "d"),
    ])
    def test_content_priority(self, record, expected):
        (entry,) = normalize_diaries([record])
        assert entry.content == expected

    def test_content_falls_back_to_serialized_record(self):
        record = {"data_hora": "2024-01-01", "humor": "bom"}
        (entry,) = normalize_diaries([record])
        assert json.loads(entry.content) == record

    def test_encoded_string_uses_same_extraction(self):
        raw = json.dumps({"id": 3, "data_hora": "2024-02-03T10:15:00Z", "descricao": "walk"})
        (entry,) = normalize_diaries([raw])
        assert entry == DiaryEntry(id=3, date="03/02/2024", content="walk")

    def test_plain_string_kept_with_sentinel_date(self):
        (entry,) = normalize_diaries(["felt fine"])
        assert entry == DiaryEntry(id=1, date=DIARY_DATE_SENTINEL, content="felt fine")

    def test_missing_timestamp_uses_sentinel(self):
        (entry,) = normalize_diaries([{"texto": "x"}])
        assert entry.date == DIARY_DATE_SENTINEL

    @pytest.mark.parametrize("element", MALFORMED_ELEMENTS)
    def test_malformed_elements_never_raise(self, element):
        (entry,) = normalize_diaries([element])
        assert isinstance(entry, DiaryEntry)
        assert isinstance(entry.content, str)
        assert isinstance(entry.date, str)


class TestQuestionnaires:
    def test_structured_record(self):
        (q,) = normalize_questionnaires([{
            "questionario_id": 11,
            "data": "2025-11-12T00:00:00.000Z",
            "pontuacao": 14,
            "nota_convertida": 7,
            "media": 6.5,
            "texto": "PHQ-9",
        }])
        assert q == QuestionnaireResponse(
            id=11, date="12/11/2025", score=14.0, converted_score=7.0, mean=6.5, text="PHQ-9"
        )

    def test_id_resolution_order(self):
        qs = normalize_questionnaires([{"questionario_id": 5, "id": 9}, {"id": 9}, {}])
        assert [q.id for q in qs] == [5, 9, 3]

    def test_numeric_strings_coerced(self):
        (q,) = normalize_questionnaires(['{"pontuacao": "12", "nota_convertida": "4.5"}'])
        assert (q.score, q.converted_score) == (12.0, 4.5)

    def test_non_numeric_values_default_to_zero(self):
        (q,) = normalize_questionnaires([{"pontuacao": "many", "nota_convertida": [1], "media": "x"}])
        assert (q.score, q.converted_score, q.mean) == (0.0, 0.0, None)

    def test_plain_string_wrapped_as_text(self):
        (q,) = normalize_questionnaires(["free answer"])
        assert q == QuestionnaireResponse(id=1, date="-", text="free answer")

    @pytest.mark.parametrize("element", MALFORMED_ELEMENTS)
    def test_malformed_elements_never_raise(self, element):
        (q,) = normalize_questionnaires([element])
        assert isinstance(q, QuestionnaireResponse)
        assert isinstance(q.score, float)
        assert isinstance(q.converted_score, float)


class TestDiagnoses:
    @pytest.mark.parametrize("record,expected", [
        ({"descricao": "d", "texto": "t", "diagnostico": "g"}, "d"),
        ({"texto": "t", "diagnostico": "g"}, "t"),
        ({"diagnostico": "g"}, "g"),
    ])
    def test_resolution_priority(self, record, expected):
        assert normalize_diagnoses([record]) == (expected,)

    def test_serialized_when_no_descriptive_field(self):
        (text,) = normalize_diagnoses([{"cid": "F41.1"}])
        assert json.loads(text) == {"cid": "F41.1"}

    def test_encoded_and_plain_strings(self):
        assert normalize_diagnoses(['{"descricao": "Anxiety"}', "Insomnia"]) == ("Anxiety", "Insomnia")

    def test_other_values_coerced(self):
        assert normalize_diagnoses([42, None]) == ("42", "-")

    @pytest.mark.parametrize("element", MALFORMED_ELEMENTS)
    def test_malformed_elements_never_raise(self, element):
        (text,) = normalize_diagnoses([element])
        assert isinstance(text, str)


class TestToNumber:
    @pytest.mark.parametrize("value,expected", [
        (None, 0.0), ("3", 3.0), (2, 2.0), ("abc", 0.0), ({}, 0.0), (float("nan"), 0.0), ("inf", 0.0),
    ])
    def test_fallbacks(self, value, expected):
        assert to_number(value) == expected
