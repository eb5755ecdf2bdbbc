"""
Prompt Formatter
==================
Turns CaseData into the causality prompt and a drug list into the interaction prompt.

Narrative precedence:
  - narrative non-empty after strip -> fixed preamble + trimmed narrative, structured fields ignored
  - otherwise                        -> fixed preamble + labeled structured blocks

Pure code, no I/O, no clock, no randomness: same input -> same prompt.
"""

from typing import Iterable, List

from errors import PromptValidationError
from models import CaseData
from prompts.system_prompts import (
    CAUSALITY_NARRATIVE_PREAMBLE,
    CAUSALITY_STRUCTURED_PREAMBLE,
    INTERACTION_PROMPT_PREFIX,
)

NOT_PROVIDED = "Not provided"
NONE_PROVIDED = "None provided"


def _or_default(value: str, default: str) -> str:
    value = (value or "").strip()
    return value or default


def _format_suspect_drugs(data: CaseData) -> List[str]:
    lines = ["- Suspected Drug(s) Details:"]
    if not data.suspect_drugs:
        lines.append(f"  - {NONE_PROVIDED}")
        return lines
    for drug in data.suspect_drugs:
        lines.append(f"  - Drug: {_or_default(drug.name, NOT_PROVIDED)}")
        lines.append(f"    - Start Date: {_or_default(drug.start_date, NOT_PROVIDED)}")
        lines.append(f"    - Stop Date: {_or_default(drug.stop_date, NOT_PROVIDED)}")
    return lines


def _format_adverse_events(data: CaseData) -> List[str]:
    lines = ["- Adverse Event(s) Details:"]
    if not data.adverse_events:
        lines.append(f"  - {NONE_PROVIDED}")
        return lines
    for event in data.adverse_events:
        lines.append(f"  - Event: {_or_default(event.name, NOT_PROVIDED)}")
        lines.append(f"    - Onset: {_or_default(event.onset_date, NOT_PROVIDED)}")
        lines.append(f"    - Resolution: {_or_default(event.resolution_date, NOT_PROVIDED)}")
    return lines


def format_case_data(data: CaseData) -> str:
    """Render every structured field as a labeled block."""
    lines = []
    lines.extend(_format_suspect_drugs(data))
    lines.extend(_format_adverse_events(data))
    lines.append(f"- Patient History: {_or_default(data.patient_history, NONE_PROVIDED)}")
    lines.append(f"- Concomitant Medications: {_or_default(data.concomitant_meds, NONE_PROVIDED)}")
    lines.append(f"- Alternative Causes for Event: {_or_default(data.alternative_causes, NONE_PROVIDED)}")
    lines.append(f"- Laboratory Data: {_or_default(data.lab_data, NONE_PROVIDED)}")
    lines.append(f"- Dechallenge Outcome: {_or_default(data.dechallenge_outcome, NOT_PROVIDED)}")
    lines.append(f"- Rechallenge Outcome: {_or_default(data.rechallenge_outcome, NOT_PROVIDED)}")
    return "\n".join(lines)


def build_causality_prompt(data: CaseData) -> str:
    """
    Build the causality prompt for one case.

    Args:
        data: The case as entered (not necessarily cleaned)

    Returns:
        Prompt string. The narrative, when present, is the only case content.
    """
    narrative = (data.narrative or "").strip()
    if narrative:
        return CAUSALITY_NARRATIVE_PREAMBLE + narrative
    return CAUSALITY_STRUCTURED_PREAMBLE + format_case_data(data)


def normalize_drug_names(drugs: Iterable[str]) -> List[str]:
    """Trim, drop blanks, de-duplicate preserving first-seen order."""
    result = []
    for name in drugs:
        name = (name or "").strip()
        if name and name not in result:
            result.append(name)
    return result


def build_interaction_prompt(drugs: Iterable[str]) -> str:
    """One instruction sentence listing the drugs in the order given."""
    names = normalize_drug_names(drugs)
    if len(names) < 2:
        raise PromptValidationError(
            f"At least two distinct drugs are required for an interaction check (got {len(names)})."
        )
    return INTERACTION_PROMPT_PREFIX + ", ".join(names)
