# ============================================================================
# src/health_records/llm/schemas.py
# ============================================================================
"""
JSON schemas for schema-constrained model output.

Written in the strict subset both backends accept: every object closes
additionalProperties and lists all of its properties as required.
"""

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

MEDICAL_ANALYSIS_SCHEMA = {
    "title": "medical_analysis",
    "type": "object",
    "properties": {
        "keyFindings": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "parameter": {"type": "string"},
                    "value": {"type": "string"},
                    "normalRange": {"type": "string"},
                    "status": {"type": "string", "enum": ["normal", "abnormal", "borderline"]},
                    "explanation": {"type": "string"},
                },
                "required": ["parameter", "value", "normalRange", "status", "explanation"],
                "additionalProperties": False,
            },
        },
        "summary": {"type": "string"},
        "recommendations": _STRING_LIST,
        "riskLevel": {"type": "string", "enum": ["low", "medium", "high"]},
        "nextSteps": _STRING_LIST,
    },
    "required": ["keyFindings", "summary", "recommendations", "riskLevel", "nextSteps"],
    "additionalProperties": False,
}

MEDICATION_LIST_SCHEMA = {
    "title": "medication_list",
    "type": "object",
    "properties": {
        "medications": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "dosage": {"type": "string"},
                    "frequency": {"type": "string"},
                    "instructions": {"type": "string"},
                    "sideEffects": _STRING_LIST,
                    "interactions": _STRING_LIST,
                    "genericAlternatives": _STRING_LIST,
                },
                "required": [
                    "name",
                    "dosage",
                    "frequency",
                    "instructions",
                    "sideEffects",
                    "interactions",
                    "genericAlternatives",
                ],
                "additionalProperties": False,
            },
        },
    },
    "required": ["medications"],
    "additionalProperties": False,
}
