from __future__ import annotations

import math

import pytest

from survey_sync.excel.extractor import EmptyInputError, cell_to_str, extract_records
from survey_sync.models.record import NormalizedRecord


@pytest.mark.parametrize("grid", [None, [], [["ID", "Response", "Notes"]]])
def test_grid_without_data_row_raises(grid):
    with pytest.raises(EmptyInputError):
        extract_records(grid)


def test_header_row_is_always_skipped():
    grid = [
        ["X9", "looks like data", "but is header", "row"],
        ["A1", "", "R", "N"],
    ]
    records = extract_records(grid)
    assert [r.id for r in records] == ["A1"]


def test_four_column_row_prefers_column_two_for_response():
    records = extract_records([["ID", "Q", "Response", "Notes"], ["A1", "", "R", "N"]])
    assert records == [NormalizedRecord(id="A1", response="R", notes="N")]


def test_three_column_row_reads_id_response_notes():
    records = extract_records([["ID", "Response", "Notes"], ["A1", "R2", "N2"]])
    assert records[0].response == "R2"
    assert records[0].notes == "N2"


def test_four_column_row_falls_back_to_column_one_when_column_two_blank():
    records = extract_records([["ID", "Q", "Response", "Notes"], ["A1", "R1", None, "N"]])
    assert records[0].response == "R1"
    assert records[0].notes == "N"


def test_consumed_column_two_is_not_reused_for_notes():
    records = extract_records([["ID", "Q", "Response", "Notes"], ["A1", "label", "R", None]])
    assert records[0].response == "R"
    assert records[0].notes == ""


def test_rows_without_id_are_dropped():
    grid = [
        ["ID", "Response", "Notes"],
        [None, "x", "y"],
        ["   ", "x", "y"],
        [float("nan"), "x", "y"],
        ["B1", "Yes", None],
    ]
    records = extract_records(grid)
    assert [r.id for r in records] == ["B1"]


def test_non_list_and_empty_rows_are_skipped():
    grid = [["ID"], None, [], "not-a-row", ("T1", "ok"), ["T2"]]
    records = extract_records(grid)
    assert [r.id for r in records] == ["T1", "T2"]
    assert records[0].response == "ok"


def test_id_only_row_is_emitted_with_empty_fields():
    records = extract_records([["ID"], ["Z1"]])
    assert records == [NormalizedRecord(id="Z1", response="", notes="")]
    assert records[0].has_changes is False


def test_values_are_trimmed_and_numeric_ids_stringified():
    grid = [["ID", "Response", "Notes"], [1001.0, "  Yes ", " note  "], [42, 3.5, None]]
    records = extract_records(grid)
    assert records[0] == NormalizedRecord(id="1001", response="Yes", notes="note")
    assert records[1].id == "42"
    assert records[1].response == "3.5"


def test_row_numbers_follow_sheet_rows():
    grid = [["ID", "Response"], ["A", "1"], [None, None], ["B", "2"]]
    records = extract_records(grid)
    assert [(r.id, r.row_number) for r in records] == [("A", 2), ("B", 4)]


def test_order_is_preserved_and_reparse_is_stable(survey_grid):
    first = extract_records(survey_grid)
    second = extract_records(survey_grid)
    assert first == second
    assert first == [
        NormalizedRecord(id="R1", response="Yes", notes="ok"),
        NormalizedRecord(id="R2", response="", notes="comment"),
    ]


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, ""),
        (math.nan, ""),
        (7.0, "7"),
        (7.25, "7.25"),
        ("  a b ", "a b"),
        (0, "0"),
    ],
)
def test_cell_to_str(value, expected):
    assert cell_to_str(value) == expected
