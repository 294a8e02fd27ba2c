"""
PyTest configuration and fixtures.
"""

import random

import pytest

from thermoscan.database import build_engine, build_session_factory, create_tables
from thermoscan.infrastructure.persistence.image_store import ImageStore
from thermoscan.infrastructure.persistence.key_value_store import (
    InMemoryKeyValueStore,
    SQLAlchemyKeyValueStore,
)
from thermoscan.infrastructure.persistence.result_store import ResultStore
from thermoscan.schemas import SubmittedImage
from thermoscan.services.analysis.analysis_engine import AnalysisEngine
from thermoscan.services.enrichment.summary_enrichment import SummaryEnrichment
from thermoscan.services.pipeline.orchestrator import PipelineOrchestrator
from thermoscan.services.quality.quality_gate import QualityGate
from thermoscan.tests.helpers import DummyGenAIClient, RecordingSleep, ScriptedRandom

# Enough passing quality draws for any single test
PASSING_QUALITY_DRAWS = (0.5,) * 100


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def sql_engine():
    """In-memory SQLite engine with all tables created."""
    engine = build_engine("sqlite://")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sql_engine):
    return SQLAlchemyKeyValueStore(build_session_factory(sql_engine))


@pytest.fixture
def large_image():
    return SubmittedImage(content=b"\x89" * 4096, filename="scan.png", content_type="image/png")


@pytest.fixture
def small_image():
    return SubmittedImage(content=b"\x89" * 100, filename="tiny.png", content_type="image/png")


@pytest.fixture
def make_orchestrator(kv_store, recording_sleep):
    """Factory for orchestrators wired to in-memory collaborators and instant sleeps."""

    def _make(
        quality_draws=PASSING_QUALITY_DRAWS,
        analysis_rng=None,
        client=None,
        analysis_sleep=None,
        store=None,
    ):
        store = store or kv_store
        return PipelineOrchestrator(
            quality_gate=QualityGate(rng=ScriptedRandom(quality_draws), sleep=recording_sleep),
            analysis_engine=AnalysisEngine(
                rng=analysis_rng or random.Random(7),
                sleep=analysis_sleep or recording_sleep,
            ),
            summary_enrichment=SummaryEnrichment(client or DummyGenAIClient(available=False)),
            result_store=ResultStore(store),
            image_store=ImageStore(store),
        )

    return _make
