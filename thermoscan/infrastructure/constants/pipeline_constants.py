"""
Constants for the thermogram analysis pipeline.

The probabilities and value ranges below are fixed design constants of the
simulated quality and analysis stages. They are not derived from image content.
"""

# Quality gate
LOW_SIGNAL_BYTE_THRESHOLD = 1024
BLURRY_PROBABILITY = 0.02
ORIENTATION_PROBABILITY = 0.02
QUALITY_CHECK_DELAY_SECONDS = 1.5

REASON_LOW_SIGNAL = "Low signal detected"
REASON_BLURRY = "Blurry image"
REASON_ORIENTATION = "Incorrect orientation"

# Analysis engine
SUSPICIOUS_PROBABILITY = 0.6
SUSPICIOUS_CONFIDENCE_RANGE = (0.85, 0.99)
NORMAL_CONFIDENCE_RANGE = (0.95, 0.99)
HOTSPOT_COUNT_RANGE = (1, 3)
HOTSPOT_POSITION_RANGE = (20.0, 80.0)
HOTSPOT_RADIUS_RANGE = (10.0, 25.0)
HOTSPOT_INTENSITY_RANGE = (0.5, 1.0)
ANALYSIS_MIN_DELAY_SECONDS = 4.0
ANALYSIS_MAX_DELAY_SECONDS = 6.0

# Enrichment placeholders
CONSULT_RECOMMENDATION = "Please consult a healthcare professional for guidance."
UNAVAILABLE_SUMMARY = "API Key not configured. AI summary is unavailable."
ERROR_SUMMARY = "An error occurred while generating the AI summary."

# Orchestrator messages
QUALITY_FAILURE_TEMPLATE = "Image quality check failed: {reasons}."
GENERIC_ERROR_MESSAGE = "An unknown error occurred during analysis."

# Persistence
HISTORY_STORAGE_KEY = "thermoScanHistory"
IMAGE_KEY_PREFIX = "image:"

# Uploads
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

# Heatmap rendering; larger decoded images get the placeholder
MAX_COMPOSITE_PIXELS = 40_000_000

DISCLAIMER = (
    "ThermoScan AI is a research prototype and not a medical device. Analysis "
    "results are for informational purposes only and should not be used for "
    "diagnosis. Always consult a qualified healthcare professional for medical advice."
)
