from dataclasses import dataclass, field
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Base class for configuration related errors"""
    pass


class ModelValidationError(ConfigurationError):
    """Raised when model configuration is invalid"""
    pass


class PipelineConfigError(ConfigurationError):
    """Raised when pipeline timing configuration is invalid"""
    pass


class StorageConfigError(ConfigurationError):
    """Raised when storage configuration is invalid"""
    pass


STORAGE_BACKENDS = ("sql", "memory")
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class LLMConfig:
    model: str = "gemini-2.5-flash"
    temperature: float = 0.0
    max_tokens: int = 1024
    api_key: Optional[str] = None
    top_p: float = 0.95
    top_k: int = 1

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Validate LLM configuration"""
        if not self.model:
            raise ModelValidationError("Gemini model name is required")

        if not (0.0 <= self.temperature <= 1.0):
            raise ModelValidationError("Temperature must be between 0.0 and 1.0")

        if self.max_tokens <= 0:
            raise ModelValidationError("max_tokens must be positive")

        if not (0.0 < self.top_p <= 1.0):
            raise ModelValidationError("top_p must be between 0 and 1")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class PipelineConfig:
    quality_delay_seconds: float = 1.5
    analysis_min_delay_seconds: float = 4.0
    analysis_max_delay_seconds: float = 6.0
    max_upload_bytes: int = 10 * 1024 * 1024

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Validate pipeline timing and upload limits"""
        if self.quality_delay_seconds < 0:
            raise PipelineConfigError("quality_delay_seconds must be non-negative")

        if self.analysis_min_delay_seconds < 0:
            raise PipelineConfigError("analysis_min_delay_seconds must be non-negative")

        if self.analysis_min_delay_seconds > self.analysis_max_delay_seconds:
            raise PipelineConfigError(
                "analysis_min_delay_seconds must not exceed analysis_max_delay_seconds"
            )

        if self.max_upload_bytes <= 0:
            raise PipelineConfigError("max_upload_bytes must be positive")


@dataclass
class StorageConfig:
    backend: str = "sql"
    database_url: str = "sqlite:///./thermoscan.db"

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Validate storage configuration"""
        if self.backend not in STORAGE_BACKENDS:
            raise StorageConfigError(
                f"Unsupported storage backend: {self.backend}. "
                f"Supported backends are: {', '.join(STORAGE_BACKENDS)}"
            )

        if self.backend == "sql" and not self.database_url:
            raise StorageConfigError("database_url is required for the sql backend")


@dataclass
class SystemConfig:
    llm: LLMConfig
    pipeline: PipelineConfig
    storage: StorageConfig
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Validate complete system configuration"""
        self.llm.validate()
        self.pipeline.validate()
        self.storage.validate()

        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.log_level}")
