"""
Dependency injection container.

This module provides a container for dependency injection, making it easy to
create and manage the pipeline services and their persistence collaborators.
"""

import logging
from typing import Any, Optional

from thermoscan.database import build_engine, build_session_factory, create_tables
from thermoscan.infrastructure.config.settings import Settings, settings as default_settings
from thermoscan.infrastructure.persistence.image_store import ImageStore
from thermoscan.infrastructure.persistence.key_value_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SQLAlchemyKeyValueStore,
)
from thermoscan.infrastructure.persistence.result_store import ResultStore
from thermoscan.services.analysis.analysis_engine import AnalysisEngine
from thermoscan.services.enrichment.summary_enrichment import SummaryEnrichment
from thermoscan.services.llm.genai_client import GenAIJSONClient
from thermoscan.services.pipeline.orchestrator import PipelineOrchestrator
from thermoscan.services.quality.quality_gate import QualityGate
from thermoscan.services.rendering.heatmap_compositor import HeatmapCompositor

logger = logging.getLogger(__name__)


class Container:
    """
    Dependency injection container.

    Acts as a factory for services and stores, creating each one lazily on
    first use and caching it for the lifetime of the container.
    """

    def __init__(self, app_settings: Optional[Settings] = None):
        self._settings = app_settings or default_settings
        self._services = {}

    @property
    def settings(self) -> Settings:
        return self._settings

    def register_service(self, name: str, service_instance: Any):
        """
        Register a service instance with the container.

        Args:
            name: Name to register the service under
            service_instance: Service instance to register
        """
        self._services[name] = service_instance
        logger.debug(f"Registered service: {name}")

    def get_service(self, name: str) -> Any:
        if name not in self._services:
            raise KeyError(f"Service not registered: {name}")
        return self._services[name]

    def has_service(self, name: str) -> bool:
        return name in self._services

    def get_key_value_store(self) -> KeyValueStore:
        service_name = "key_value_store"
        if not self.has_service(service_name):
            config = self._settings.get_config().storage
            if config.backend == "memory":
                store = InMemoryKeyValueStore()
                logger.info("Using in-memory key-value store")
            else:
                engine = build_engine(config.database_url)
                create_tables(engine)
                store = SQLAlchemyKeyValueStore(build_session_factory(engine))
            self.register_service(service_name, store)
        return self.get_service(service_name)

    def get_genai_client(self) -> GenAIJSONClient:
        service_name = "genai_client"
        if not self.has_service(service_name):
            client = GenAIJSONClient.from_config(self._settings.get_llm_config("gemini"))
            if not client.is_available():
                logger.warning("GEMINI_API_KEY for Gemini is not set. AI summary will be disabled.")
            self.register_service(service_name, client)
        return self.get_service(service_name)

    def get_heatmap_compositor(self) -> HeatmapCompositor:
        service_name = "heatmap_compositor"
        if not self.has_service(service_name):
            self.register_service(service_name, HeatmapCompositor())
        return self.get_service(service_name)

    def get_orchestrator(self) -> PipelineOrchestrator:
        """Get or create the pipeline orchestrator singleton."""
        service_name = "pipeline_orchestrator"
        if not self.has_service(service_name):
            pipeline_config = self._settings.get_config().pipeline
            store = self.get_key_value_store()
            orchestrator = PipelineOrchestrator(
                quality_gate=QualityGate(delay_seconds=pipeline_config.quality_delay_seconds),
                analysis_engine=AnalysisEngine(
                    min_delay_seconds=pipeline_config.analysis_min_delay_seconds,
                    max_delay_seconds=pipeline_config.analysis_max_delay_seconds,
                ),
                summary_enrichment=SummaryEnrichment(self.get_genai_client()),
                result_store=ResultStore(store),
                image_store=ImageStore(store),
            )
            self.register_service(service_name, orchestrator)
            logger.info("Created pipeline orchestrator")
        return self.get_service(service_name)
