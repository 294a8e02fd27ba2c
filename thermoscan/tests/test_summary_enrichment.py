"""
Tests for summary enrichment and the GenAI JSON client.
"""

import types

import pytest

from thermoscan.infrastructure.constants.pipeline_constants import (
    CONSULT_RECOMMENDATION,
    ERROR_SUMMARY,
    UNAVAILABLE_SUMMARY,
)
from thermoscan.schemas import Enrichment, Hotspot, NormalOutcome, SuspiciousOutcome
from thermoscan.services.enrichment.summary_enrichment import (
    SummaryEnrichment,
    format_confidence_percent,
)
from thermoscan.services.llm.exceptions import LLMAPIError, LLMResponseParseError
from thermoscan.services.llm.genai_client import GenAIJSONClient
from thermoscan.services.llm.prompts.tasks.thermogram_summary import ThermogramSummaryPrompts
from thermoscan.tests.helpers import DummyGenAIClient

SUSPICIOUS = SuspiciousOutcome(
    confidence=0.9734,
    hotspots=[Hotspot(x=40.0, y=55.0, radius=12.0, intensity=0.8)],
)
NORMAL = NormalOutcome(confidence=0.96)


def test_format_confidence_percent():
    assert format_confidence_percent(0.9734) == "97.3"
    assert format_confidence_percent(0.95) == "95.0"


def test_prompt_mentions_classification_and_confidence():
    prompt = ThermogramSummaryPrompts.get_prompt(
        {"classification_label": "Suspicious", "confidence_percent": "97.3"}
    )

    assert "Suspicious" in prompt
    assert "97.3%" in prompt
    assert "healthcare professional" in prompt


@pytest.mark.asyncio
async def test_unconfigured_client_returns_unavailable_placeholder():
    client = DummyGenAIClient(available=False)
    enrichment = SummaryEnrichment(client)

    result = await enrichment.enrich(SUSPICIOUS)

    assert result.summary == UNAVAILABLE_SUMMARY
    assert result.recommendation == CONSULT_RECOMMENDATION
    assert client.prompts == []
    assert not enrichment.is_configured


@pytest.mark.asyncio
async def test_successful_enrichment_is_returned_verbatim():
    payload = {
        "summary": "Two warm regions were flagged.",
        "recommendation": "Discuss these findings with a clinician.",
    }
    client = DummyGenAIClient(payload=payload)

    result = await SummaryEnrichment(client).enrich(SUSPICIOUS)

    assert result == Enrichment(**payload)
    assert "Suspicious" in client.prompts[0]
    assert "97.3" in client.prompts[0]


@pytest.mark.asyncio
async def test_normal_outcome_prompt():
    client = DummyGenAIClient(payload={"summary": "s", "recommendation": "r"})

    await SummaryEnrichment(client).enrich(NORMAL)

    assert "Normal" in client.prompts[0]
    assert "96.0" in client.prompts[0]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "client",
    [
        DummyGenAIClient(error=LLMAPIError("quota exceeded")),
        DummyGenAIClient(error=LLMResponseParseError("not json")),
        DummyGenAIClient(error=RuntimeError("socket closed")),
        DummyGenAIClient(payload={"summary": "only a summary"}),
        DummyGenAIClient(payload={"summary": 1, "recommendation": "r"}),
        DummyGenAIClient(payload=["summary", "recommendation"]),
    ],
    ids=["api-error", "parse-error", "unexpected-error", "missing-field", "wrong-type", "not-object"],
)
async def test_failures_degrade_to_error_placeholder(client):
    result = await SummaryEnrichment(client).enrich(SUSPICIOUS)

    assert result.summary == ERROR_SUMMARY
    assert result.recommendation == CONSULT_RECOMMENDATION


def test_client_without_key_is_unavailable():
    client = GenAIJSONClient(api_key=None)

    assert not client.is_available()


def test_client_from_config():
    client = GenAIJSONClient.from_config({"api_key": None, "model": "test-model", "temperature": 0.2})

    assert client.model == "test-model"
    assert client.temperature == 0.2
    assert not client.is_available()


@pytest.mark.asyncio
async def test_generate_json_without_client_raises():
    with pytest.raises(LLMAPIError):
        await GenAIJSONClient(api_key=None).generate_json("prompt")


class _FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return types.SimpleNamespace(text=self.text)


def _client_with(models):
    client = GenAIJSONClient(api_key=None, model="gemini-test")
    client._client = types.SimpleNamespace(aio=types.SimpleNamespace(models=models))
    return client


@pytest.mark.asyncio
async def test_generate_json_requests_json_mime_type():
    models = _FakeModels(text='{"summary": "s", "recommendation": "r"}')
    client = _client_with(models)

    result = await client.generate_json("prompt", response_schema={"type": "OBJECT"})

    assert result == {"summary": "s", "recommendation": "r"}
    call = models.calls[0]
    assert call["model"] == "gemini-test"
    assert call["contents"] == "prompt"
    assert call["config"].response_mime_type == "application/json"


@pytest.mark.asyncio
async def test_generate_json_wraps_remote_errors():
    client = _client_with(_FakeModels(error=ConnectionError("reset")))

    with pytest.raises(LLMAPIError):
        await client.generate_json("prompt")


@pytest.mark.parametrize(
    "text, expected",
    [
        ('{"summary": "a", "recommendation": "b"}', {"summary": "a", "recommendation": "b"}),
        ('```json\n{"summary": "a", "recommendation": "b"}\n```', {"summary": "a", "recommendation": "b"}),
        ("```\n[1, 2]\n```", [1, 2]),
    ],
)
def test_parse_response(text, expected):
    assert GenAIJSONClient._parse_response(types.SimpleNamespace(text=text)) == expected


@pytest.mark.parametrize("text", [None, "", "The summary is unavailable."])
def test_parse_response_rejects_non_json(text):
    with pytest.raises(LLMResponseParseError):
        GenAIJSONClient._parse_response(types.SimpleNamespace(text=text))
