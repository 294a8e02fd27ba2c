"""Application settings and configuration"""

import os
import logging
from typing import Dict, Any, Optional, List
import json
from dataclasses import asdict

from dotenv import load_dotenv

from thermoscan.infrastructure.constants.llm_constants import (
    GEMINI_MODEL_NAME,
    GEMINI_TEMPERATURE,
    GEMINI_MAX_TOKENS,
    GEMINI_TOP_P,
    GEMINI_TOP_K,
    ENV_GEMINI_API_KEY,
    ENV_GEMINI_MODEL,
    ENV_GEMINI_TEMPERATURE,
    ENV_GEMINI_MAX_TOKENS,
    ENV_GEMINI_TOP_P,
    ENV_GEMINI_TOP_K,
)
from thermoscan.infrastructure.constants.pipeline_constants import (
    QUALITY_CHECK_DELAY_SECONDS,
    ANALYSIS_MIN_DELAY_SECONDS,
    ANALYSIS_MAX_DELAY_SECONDS,
    MAX_UPLOAD_BYTES,
)
from thermoscan.infrastructure.data.config import (
    ConfigurationError,
    SystemConfig,
    LLMConfig,
    PipelineConfig,
    StorageConfig,
)

DEFAULT_DATABASE_URL = "sqlite:///./thermoscan.db"


class Settings:
    """Manages application settings and configuration"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._config: Optional[SystemConfig] = None

        # Load from .env file if exists; real environment variables win
        load_dotenv(override=False)

        # Storage configuration
        self.database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
        self.storage_backend = os.getenv("STORAGE_BACKEND", "sql").lower()

        # LLM provider configuration
        self.llm_providers = {
            "gemini": {
                "api_key": os.getenv(ENV_GEMINI_API_KEY) or None,
                "model": os.getenv(ENV_GEMINI_MODEL, GEMINI_MODEL_NAME),
                "temperature": float(
                    os.getenv(ENV_GEMINI_TEMPERATURE, str(GEMINI_TEMPERATURE))
                ),
                "max_tokens": int(
                    os.getenv(ENV_GEMINI_MAX_TOKENS, str(GEMINI_MAX_TOKENS))
                ),
                "top_p": float(os.getenv(ENV_GEMINI_TOP_P, str(GEMINI_TOP_P))),
                "top_k": int(os.getenv(ENV_GEMINI_TOP_K, str(GEMINI_TOP_K))),
            },
        }

        # Simulated model latency
        self.quality_delay_seconds = self._get_float(
            "QUALITY_CHECK_DELAY_SECONDS", QUALITY_CHECK_DELAY_SECONDS
        )
        self.analysis_min_delay_seconds = self._get_float(
            "ANALYSIS_MIN_DELAY_SECONDS", ANALYSIS_MIN_DELAY_SECONDS
        )
        self.analysis_max_delay_seconds = self._get_float(
            "ANALYSIS_MAX_DELAY_SECONDS", ANALYSIS_MAX_DELAY_SECONDS
        )
        self.max_upload_bytes = self._get_int("MAX_UPLOAD_BYTES", MAX_UPLOAD_BYTES)

        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # CORS settings
        self.cors_origins = self._get_list("CORS_ORIGINS", ["*"])

        # Uvicorn server settings
        self.uvicorn_host = os.getenv("UVICORN_HOST", "0.0.0.0")
        self.uvicorn_port = self._get_int("UVICORN_PORT", 8000)

        # Set default log level for httpx and httpcore to reduce debug noise
        logging.getLogger("httpx").setLevel(logging.INFO)
        logging.getLogger("httpcore").setLevel(logging.INFO)

    def load_config(self) -> SystemConfig:
        """Load and validate system configuration"""
        try:
            gemini = self.llm_providers["gemini"]
            self._config = SystemConfig(
                llm=LLMConfig(
                    model=gemini["model"],
                    temperature=gemini["temperature"],
                    max_tokens=gemini["max_tokens"],
                    api_key=gemini["api_key"],
                    top_p=gemini["top_p"],
                    top_k=gemini["top_k"],
                ),
                pipeline=PipelineConfig(
                    quality_delay_seconds=self.quality_delay_seconds,
                    analysis_min_delay_seconds=self.analysis_min_delay_seconds,
                    analysis_max_delay_seconds=self.analysis_max_delay_seconds,
                    max_upload_bytes=self.max_upload_bytes,
                ),
                storage=StorageConfig(
                    backend=self.storage_backend,
                    database_url=self.database_url,
                ),
                log_level=self.log_level,
                cors_origins=self.cors_origins,
            )
            return self._config

        except ConfigurationError as e:
            self.logger.error(f"Error loading config: {str(e)}")
            raise

    def get_config(self) -> SystemConfig:
        """Get current configuration"""
        if not self._config:
            return self.load_config()
        return self._config

    def validate(self) -> bool:
        """Validate configuration, raising ConfigurationError on bad values"""
        self.load_config()
        if not self.is_enrichment_configured():
            self.logger.warning(
                f"{ENV_GEMINI_API_KEY} is not set. AI summary will be disabled."
            )
        return True

    def _get_float(self, key: str, default: float) -> float:
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            self.logger.warning(f"Invalid float for {key}: {value!r}, using {default}")
            return default

    def _get_int(self, key: str, default: int) -> int:
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            self.logger.warning(f"Invalid integer for {key}: {value!r}, using {default}")
            return default

    def _get_list(self, key: str, default: List[str]) -> List[str]:
        value = os.getenv(key)
        if value is None:
            return default
        try:
            parsed = json.loads(value)
            if isinstance(parsed, list):
                return [str(item) for item in parsed]
        except json.JSONDecodeError:
            pass
        return [item.strip() for item in value.split(",") if item.strip()]

    def get_llm_config(self, provider: str = "gemini") -> Dict[str, Any]:
        """Get LLM configuration for specific provider"""
        if provider not in self.llm_providers:
            self.logger.warning(
                f"Unknown LLM provider: {provider}, falling back to gemini"
            )
            provider = "gemini"
        return self.llm_providers[provider].copy()

    def is_enrichment_configured(self) -> bool:
        """Whether a Gemini credential is available for summary enrichment"""
        return bool(self.llm_providers["gemini"].get("api_key"))

    def get_settings_summary(self) -> Dict[str, Any]:
        """Get summary of current settings with secrets masked"""
        config = asdict(self.get_config())
        if config["llm"].get("api_key"):
            config["llm"]["api_key"] = "***"
        return {"config": config}


# Global instance
settings = Settings()
