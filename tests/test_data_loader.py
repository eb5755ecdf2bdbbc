"""
Unit tests for case file loading (.json and .csv).
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json

import pytest
from pydantic import ValidationError

from data_loader import case_from_record, load_cases, validation_message


def test_json_single_case(tmp_path):
    path = tmp_path / "case.json"
    path.write_text(json.dumps({
        "case_id": "C-1",
        "narrative": "Angioedema two days after starting lisinopril.",
    }), encoding="utf-8")
    cases = load_cases(str(path))
    assert len(cases) == 1
    case_id, case, error = cases[0]
    assert error is None
    assert case_id == "C-1"
    assert case.narrative.startswith("Angioedema")


def test_json_list_assigns_default_ids(tmp_path):
    path = tmp_path / "cases.json"
    path.write_text(json.dumps([
        {"suspect_drugs": [{"name": "Atorvastatin", "start_date": "2024-01-01"}],
         "adverse_events": [{"name": "Myalgia"}]},
        {"case_id": "named", "narrative": "x"},
    ]), encoding="utf-8")
    cases = load_cases(str(path))
    assert [cid for cid, _, _ in cases] == ["case_1", "named"]
    assert cases[0][1].suspect_drugs[0].start_date == "2024-01-01"


def test_csv_list_columns(tmp_path):
    path = tmp_path / "cases.csv"
    path.write_text(
        "case_id,narrative,suspect_drugs,adverse_events,dechallenge_outcome,concomitant_meds\n"
        "R-7,,Atorvastatin|2024-01-01|; Clarithromycin|2024-01-10|2024-01-20,"
        "Myalgia|2024-01-15|,Improved,Amlodipine\n",
        encoding="utf-8",
    )
    (case_id, case, _), = load_cases(str(path))
    assert case_id == "R-7"
    assert case.narrative == ""
    assert [d.name for d in case.suspect_drugs] == ["Atorvastatin", "Clarithromycin"]
    assert case.suspect_drugs[0].stop_date == ""
    assert case.suspect_drugs[1].stop_date == "2024-01-20"
    assert case.adverse_events[0].onset_date == "2024-01-15"
    assert case.dechallenge_outcome == "Improved"
    assert case.concomitant_meds == "Amlodipine"


def test_csv_missing_cells_become_empty(tmp_path):
    path = tmp_path / "cases.csv"
    path.write_text("narrative,suspect_drugs\nRash after penicillin.,\n", encoding="utf-8")
    (case_id, case, _), = load_cases(str(path))
    assert case_id == "case_1"
    assert case.suspect_drugs == []
    assert case.lab_data == ""


def test_record_does_not_mutate_input():
    record = {"case_id": "A", "narrative": "n"}
    case_from_record(record)
    assert record == {"case_id": "A", "narrative": "n"}


def test_unsupported_extension(tmp_path):
    path = tmp_path / "cases.txt"
    path.write_text("x", encoding="utf-8")
    with pytest.raises(ValueError):
        load_cases(str(path))


def test_invalid_record_keeps_the_rest_of_the_file(tmp_path):
    path = tmp_path / "cases.csv"
    path.write_text(
        "case_id,narrative,dechallenge_outcome\n"
        "A,x,Resolved\n"
        "B,y,recovered\n",
        encoding="utf-8",
    )
    (a_id, a_case, a_err), (b_id, b_case, b_err) = load_cases(str(path))
    assert (a_id, a_err) == ("A", None)
    assert a_case.dechallenge_outcome == "Resolved"
    assert b_id == "B"
    assert b_case is None
    assert b_err.startswith("dechallenge_outcome:")


def test_invalid_json_record_keeps_its_id(tmp_path):
    path = tmp_path / "cases.json"
    path.write_text(json.dumps([
        {"case_id": "bad", "suspect_drugs": "Warfarin"},
        {"narrative": "ok"},
    ]), encoding="utf-8")
    cases = load_cases(str(path))
    assert [(cid, err is None) for cid, _, err in cases] == [("bad", False), ("case_2", True)]
    assert "suspect_drugs" in cases[0][2]


def test_validation_message_is_one_line():
    with pytest.raises(ValidationError) as exc:
        case_from_record({"dechallenge_outcome": "recovered", "rechallenge_outcome": "yes"})
    message = validation_message(exc.value)
    assert "\n" not in message
    assert "dechallenge_outcome:" in message
    assert "rechallenge_outcome:" in message


def test_duplicate_ids_are_made_unique(tmp_path):
    path = tmp_path / "cases.csv"
    path.write_text(
        "case_id,narrative\n"
        "C-1,first\n"
        "C-1,second\n"
        "C-1_2,third\n"
        "C-1,fourth\n",
        encoding="utf-8",
    )
    cases = load_cases(str(path))
    assert [cid for cid, _, _ in cases] == ["C-1", "C-1_3", "C-1_2", "C-1_4"]
    assert [c.narrative for _, c, _ in cases] == ["first", "second", "third", "fourth"]


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-q"]))
