from thermoscan.services.pipeline.exceptions import RunCancelledError


class CancellationToken:
    """
    Cooperative cancellation flag for one pipeline run.

    Stages already in flight run to completion; the run checks the token
    before starting each next stage.
    """

    def __init__(self, run_sequence: int):
        self.run_sequence = run_sequence
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self, next_stage: str) -> None:
        if self._cancelled:
            raise RunCancelledError(self.run_sequence, next_stage)
