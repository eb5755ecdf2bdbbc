"""
Structured LLM task configurations.

One generic task shape, two concrete instances. The gateway runs either through
the same request/parse/classify path; only these parameters differ.
"""

from dataclasses import dataclass

from config import CAUSALITY_TEMPERATURE, INTERACTION_TEMPERATURE
from models import IndividualAssessment, InteractionPair
from prompts.response_schemas import CAUSALITY_ASSESSMENT_SCHEMA, DRUG_INTERACTION_SCHEMA
from prompts.system_prompts import CAUSALITY_SYSTEM_INSTRUCTION, INTERACTION_SYSTEM_INSTRUCTION


@dataclass(frozen=True)
class StructuredTask:
    name: str
    system_instruction: str
    schema: dict
    temperature: float
    result_type: type
    failure_prefix: str
    unknown_message: str


CAUSALITY_TASK = StructuredTask(
    name="causality",
    system_instruction=CAUSALITY_SYSTEM_INSTRUCTION,
    schema=CAUSALITY_ASSESSMENT_SCHEMA,
    temperature=CAUSALITY_TEMPERATURE,
    result_type=IndividualAssessment,
    failure_prefix="Failed to get assessment from AI",
    unknown_message="An unknown error occurred during AI assessment.",
)

INTERACTION_TASK = StructuredTask(
    name="interaction",
    system_instruction=INTERACTION_SYSTEM_INSTRUCTION,
    schema=DRUG_INTERACTION_SCHEMA,
    temperature=INTERACTION_TEMPERATURE,
    result_type=InteractionPair,
    failure_prefix="Failed to get interaction data from AI",
    unknown_message="An unknown error occurred during AI interaction check.",
)
