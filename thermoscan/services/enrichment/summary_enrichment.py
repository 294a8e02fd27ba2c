"""
Natural-language enrichment of analysis outcomes.

Asks the text-generation collaborator for a two-field JSON object
(``summary``, ``recommendation``). Enrichment never fails the pipeline: a
missing credential yields the "unavailable" placeholder and any remote, parse
or shape failure yields the error placeholder.
"""

import logging
from typing import Union

from pydantic import ValidationError

from thermoscan.infrastructure.constants.llm_constants import ENRICHMENT_RESPONSE_SCHEMA
from thermoscan.infrastructure.constants.pipeline_constants import (
    CONSULT_RECOMMENDATION,
    ERROR_SUMMARY,
    UNAVAILABLE_SUMMARY,
)
from thermoscan.schemas import Enrichment, NormalOutcome, SuspiciousOutcome
from thermoscan.services.llm.exceptions import LLMServiceError
from thermoscan.services.llm.genai_client import GenAIJSONClient
from thermoscan.services.llm.prompts.tasks.thermogram_summary import ThermogramSummaryPrompts

logger = logging.getLogger(__name__)

UNAVAILABLE_ENRICHMENT = Enrichment(
    summary=UNAVAILABLE_SUMMARY, recommendation=CONSULT_RECOMMENDATION
)
ERROR_ENRICHMENT = Enrichment(summary=ERROR_SUMMARY, recommendation=CONSULT_RECOMMENDATION)


def format_confidence_percent(confidence: float) -> str:
    """Confidence in [0, 1] as a percentage with one decimal, e.g. 0.9734 -> "97.3"."""
    return f"{confidence * 100:.1f}"


class SummaryEnrichment:
    def __init__(self, client: GenAIJSONClient):
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client.is_available()

    async def enrich(self, outcome: Union[NormalOutcome, SuspiciousOutcome]) -> Enrichment:
        if not self._client.is_available():
            logger.info("Gemini API key not configured; returning unavailable summary")
            return UNAVAILABLE_ENRICHMENT

        prompt = ThermogramSummaryPrompts.get_prompt(
            {
                "classification_label": outcome.classification,
                "confidence_percent": format_confidence_percent(outcome.confidence),
            }
        )

        try:
            payload = await self._client.generate_json(
                prompt, response_schema=ENRICHMENT_RESPONSE_SCHEMA
            )
            return Enrichment.model_validate(payload)
        except (LLMServiceError, ValidationError) as e:
            logger.error(f"Error fetching AI summary from Gemini: {e}")
            return ERROR_ENRICHMENT
        except Exception:
            logger.exception("Unexpected error while generating AI summary")
            return ERROR_ENRICHMENT
