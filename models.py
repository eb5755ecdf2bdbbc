"""
Case Data Model
=================
Transient value objects for one assessment / interaction-check round trip.
Input side: SuspectDrug, AdverseEvent, CaseData
Output side: IndividualAssessment, InteractionPair (validated from the LLM reply)
"""

import re
from enum import Enum
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

DechallengeOutcome = Literal["Resolved", "Improved", "Unchanged", "Worsened", "Unknown", ""]
RechallengeOutcome = Literal["Reappeared", "Did not reappear", "Not applicable", ""]

# Separators accepted in the free-text concomitant medications field
_MED_SPLIT_RE = re.compile(r"[,;\n]")


# ============================================================
# Input: ICSR case
# ============================================================

class SuspectDrug(BaseModel):
    name: str = ""
    start_date: str = ""
    stop_date: str = ""


class AdverseEvent(BaseModel):
    name: str = ""
    onset_date: str = ""
    resolution_date: str = ""


class CaseData(BaseModel):
    """One ICSR as entered by the user. Dates are free text, never parsed."""

    narrative: str = ""
    suspect_drugs: List[SuspectDrug] = Field(default_factory=list)
    adverse_events: List[AdverseEvent] = Field(default_factory=list)
    patient_history: str = ""
    dechallenge_outcome: DechallengeOutcome = ""
    rechallenge_outcome: RechallengeOutcome = ""
    alternative_causes: str = ""
    concomitant_meds: str = ""
    lab_data: str = ""

    def cleaned(self) -> "CaseData":
        """Trimmed copy: narrative and names stripped, nameless drugs/events dropped."""
        drugs = [
            d.model_copy(update={"name": d.name.strip()})
            for d in self.suspect_drugs if d.name.strip()
        ]
        events = [
            e.model_copy(update={"name": e.name.strip()})
            for e in self.adverse_events if e.name.strip()
        ]
        return self.model_copy(update={
            "narrative": self.narrative.strip(),
            "suspect_drugs": drugs,
            "adverse_events": events,
        })

    def is_submittable(self) -> bool:
        """A narrative, or at least one named drug AND one named event."""
        if self.narrative.strip():
            return True
        has_drug = any(d.name.strip() for d in self.suspect_drugs)
        has_event = any(e.name.strip() for e in self.adverse_events)
        return has_drug and has_event

    def interaction_drugs(self) -> List[str]:
        """Suspect drugs plus concomitant meds, trimmed and de-duplicated in order."""
        names = [d.name for d in self.suspect_drugs]
        names.extend(_MED_SPLIT_RE.split(self.concomitant_meds))
        seen = []
        for name in names:
            name = name.strip()
            if name and name not in seen:
                seen.append(name)
        return seen


# ============================================================
# Output: free-text tolerant enums
# ============================================================

class CausalityCategory(str, Enum):
    PROBABLE = "Probable"
    POSSIBLE = "Possible"
    UNLIKELY = "Unlikely"
    NOT_RELATED = "Not Related"
    UNASSESSABLE = "Unassessable/Unclassifiable"
    OTHER = "Other"

    @classmethod
    def from_raw(cls, raw: str) -> "CausalityCategory":
        key = (raw or "").strip().lower()
        for member in cls:
            if member is not cls.OTHER and member.value.lower() == key:
                return member
        return cls.OTHER


class Severity(str, Enum):
    MAJOR = "Major"
    MODERATE = "Moderate"
    MINOR = "Minor"
    OTHER = "Other"

    @classmethod
    def from_raw(cls, raw: str) -> "Severity":
        key = (raw or "").strip().lower()
        for member in cls:
            if member is not cls.OTHER and member.value.lower() == key:
                return member
        return cls.OTHER


# ============================================================
# Output: validated LLM records
# ============================================================

class IndividualAssessment(BaseModel):
    """Causality assessment for a single drug-event pair."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    drug_name: str
    adverse_event: str
    causality_category: str
    rationale: str

    @property
    def category(self) -> CausalityCategory:
        return CausalityCategory.from_raw(self.causality_category)


class InteractionPair(BaseModel):
    """A single drug-drug interaction."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    drug_a: str
    drug_b: str
    severity: str
    description: str

    @property
    def severity_level(self) -> Severity:
        return Severity.from_raw(self.severity)


AssessmentResult = List[IndividualAssessment]
InteractionResult = List[InteractionPair]
