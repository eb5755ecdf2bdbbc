"""
Response schemas for the two LLM tasks (JSON Schema, declarative only).
Field descriptions are part of the output contract sent to the model.
"""

CAUSALITY_ASSESSMENT_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "drug_name": {
                "type": "string",
                "description": "The name of the suspected drug for this specific assessment.",
            },
            "adverse_event": {
                "type": "string",
                "description": "The name of the adverse event for this specific assessment.",
            },
            "causality_category": {
                "type": "string",
                "description": (
                    "The assessed causality category (Probable, Possible, Unlikely, "
                    "Not Related, Unassessable/Unclassifiable) for this drug-event pair."
                ),
            },
            "rationale": {
                "type": "string",
                "description": "A detailed explanation for the assessment of this specific drug-event pair.",
            },
        },
        "required": ["drug_name", "adverse_event", "causality_category", "rationale"],
    },
}

DRUG_INTERACTION_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "drug_a": {
                "type": "string",
                "description": "The first interacting drug.",
            },
            "drug_b": {
                "type": "string",
                "description": "The second interacting drug.",
            },
            "severity": {
                "type": "string",
                "description": "Clinical severity of the interaction: Major, Moderate, or Minor.",
            },
            "description": {
                "type": "string",
                "description": "Mechanism, potential clinical effect, and a brief management recommendation.",
            },
        },
        "required": ["drug_a", "drug_b", "severity", "description"],
    },
}
