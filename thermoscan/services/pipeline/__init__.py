from .cancellation import CancellationToken
from .exceptions import PipelineError, RecordNotFoundError, RunCancelledError
from .orchestrator import PipelineOrchestrator

__all__ = [
    "PipelineOrchestrator",
    "CancellationToken",
    "PipelineError",
    "RecordNotFoundError",
    "RunCancelledError",
]
