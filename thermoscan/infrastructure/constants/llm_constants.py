"""
Constants for LLM configuration.

This module defines constants for the Gemini enrichment collaborator. These
constants are used as defaults in settings.py and should be referenced by
every service that needs LLM parameters.
"""

# Gemini model constants
GEMINI_MODEL_NAME = "gemini-2.5-flash"
GEMINI_TEMPERATURE = 0.0
GEMINI_MAX_TOKENS = 1024
GEMINI_TOP_P = 0.95
GEMINI_TOP_K = 1

# Environment variable names
ENV_GEMINI_API_KEY = "GEMINI_API_KEY"
ENV_GEMINI_MODEL = "GEMINI_MODEL"
ENV_GEMINI_TEMPERATURE = "GEMINI_TEMPERATURE"
ENV_GEMINI_MAX_TOKENS = "GEMINI_MAX_TOKENS"
ENV_GEMINI_TOP_P = "GEMINI_TOP_P"
ENV_GEMINI_TOP_K = "GEMINI_TOP_K"

# Structured response contract for summary enrichment
ENRICHMENT_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {
            "type": "STRING",
            "description": "A brief, professional summary of the analysis result.",
        },
        "recommendation": {
            "type": "STRING",
            "description": (
                "A clear recommendation to consult a healthcare professional, "
                "reinforcing that this is not a diagnosis."
            ),
        },
    },
    "required": ["summary", "recommendation"],
}
