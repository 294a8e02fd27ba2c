class PipelineError(Exception):
    """Base exception for the analysis pipeline."""
    pass


class RecordNotFoundError(PipelineError):
    """Raised when a history record id is unknown."""

    def __init__(self, record_id: str):
        super().__init__(f"Analysis record not found: {record_id}")
        self.record_id = record_id


class RunCancelledError(PipelineError):
    """Raised at a stage boundary when a run has been superseded."""

    def __init__(self, run_sequence: int, stage: str):
        super().__init__(f"Run {run_sequence} cancelled before {stage}")
        self.run_sequence = run_sequence
        self.stage = stage
