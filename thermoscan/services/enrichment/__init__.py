from .summary_enrichment import (
    ERROR_ENRICHMENT,
    UNAVAILABLE_ENRICHMENT,
    SummaryEnrichment,
    format_confidence_percent,
)

__all__ = [
    "SummaryEnrichment",
    "UNAVAILABLE_ENRICHMENT",
    "ERROR_ENRICHMENT",
    "format_confidence_percent",
]
