"""
Thermogram summary prompts for LLM services
"""

from typing import Dict, Any


class ThermogramSummaryPrompts:
    """
    Prompt templates for summarizing a thermogram classification.
    """

    @staticmethod
    def get_prompt(request: Dict[str, Any]) -> str:
        """
        Generate the summary prompt for an analysis outcome.

        Args:
            request: Dictionary with ``classification_label`` and
                ``confidence_percent`` (already formatted, e.g. "97.3")

        Returns:
            Formatted prompt string
        """
        classification_label = request["classification_label"]
        confidence_percent = request["confidence_percent"]

        return (
            f"A thermogram analysis resulted in a '{classification_label}' classification "
            f"with a {confidence_percent}% confidence score. As an AI medical assistant, "
            "provide a brief, professional, and reassuring summary. IMPORTANT: This is not "
            "a diagnosis. Emphasize that the user must consult a healthcare professional for "
            "any medical advice or diagnosis. Do not provide medical advice. Structure the "
            "output as the specified JSON object."
        )
