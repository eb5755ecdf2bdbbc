"""
Unit tests for the case data model helpers and the free-text tolerant enums.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from pydantic import ValidationError

from models import (
    AdverseEvent,
    CaseData,
    CausalityCategory,
    InteractionPair,
    Severity,
    SuspectDrug,
)


def test_defaults_are_empty():
    case = CaseData()
    assert case.narrative == ""
    assert case.suspect_drugs == []
    assert case.adverse_events == []
    assert case.dechallenge_outcome == ""


def test_outcomes_restricted():
    CaseData(dechallenge_outcome="Resolved", rechallenge_outcome="Did not reappear")
    with pytest.raises(ValidationError):
        CaseData(dechallenge_outcome="Gone")
    with pytest.raises(ValidationError):
        CaseData(rechallenge_outcome="Yes")


def test_cleaned_trims_and_drops_blank_entries():
    case = CaseData(
        narrative="  text  ",
        suspect_drugs=[SuspectDrug(name=" Amiodarone ", start_date="2023-05-01"), SuspectDrug(name="  ")],
        adverse_events=[AdverseEvent(name=""), AdverseEvent(name="QT prolongation ")],
    )
    cleaned = case.cleaned()
    assert cleaned.narrative == "text"
    assert [d.name for d in cleaned.suspect_drugs] == ["Amiodarone"]
    assert cleaned.suspect_drugs[0].start_date == "2023-05-01"
    assert [e.name for e in cleaned.adverse_events] == ["QT prolongation"]
    # original untouched
    assert len(case.suspect_drugs) == 2


def test_is_submittable():
    assert CaseData(narrative="Hepatitis after isoniazid.").is_submittable()
    assert not CaseData(narrative="   ").is_submittable()
    assert not CaseData(suspect_drugs=[SuspectDrug(name="Isoniazid")]).is_submittable()
    assert not CaseData(
        suspect_drugs=[SuspectDrug(name="Isoniazid")],
        adverse_events=[AdverseEvent(name=" ")],
    ).is_submittable()
    assert CaseData(
        suspect_drugs=[SuspectDrug(name=""), SuspectDrug(name="Isoniazid")],
        adverse_events=[AdverseEvent(name="Hepatitis")],
    ).is_submittable()


def test_interaction_drugs_merges_and_dedupes():
    case = CaseData(
        suspect_drugs=[SuspectDrug(name="Warfarin"), SuspectDrug(name="")],
        concomitant_meds="Aspirin; warfarin,Warfarin\nOmeprazole, ",
    )
    assert case.interaction_drugs() == ["Warfarin", "Aspirin", "warfarin", "Omeprazole"]


def test_category_from_raw():
    assert CausalityCategory.from_raw("Probable") is CausalityCategory.PROBABLE
    assert CausalityCategory.from_raw(" not related ") is CausalityCategory.NOT_RELATED
    assert CausalityCategory.from_raw("Unassessable/Unclassifiable") is CausalityCategory.UNASSESSABLE
    assert CausalityCategory.from_raw("Certain") is CausalityCategory.OTHER
    assert CausalityCategory.from_raw("") is CausalityCategory.OTHER


def test_severity_keeps_raw_string():
    pair = InteractionPair(drug_a="A", drug_b="B", severity="Contraindicated", description="x")
    assert pair.severity == "Contraindicated"
    assert pair.severity_level is Severity.OTHER
    assert Severity.from_raw("minor") is Severity.MINOR


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-q"]))
