"""Error taxonomy for the submission, polling and delivery workflow."""

from __future__ import annotations


###############################################################################
class ExocalError(Exception):
    """Base class for every error surfaced to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    # -------------------------------------------------------------------------
    def __str__(self) -> str:
        return self.message


###############################################################################
class ValidationError(ExocalError):
    """No dataset slot carries a file or a demo flag."""


###############################################################################
class SubmissionError(ExocalError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


###############################################################################
class PollingTransportError(ExocalError):
    """A status request failed before the service could report on the job."""


###############################################################################
class PollingExhaustedError(PollingTransportError):
    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


###############################################################################
class JobError(ExocalError):
    """The service reported the job as failed."""


###############################################################################
class DeliveryError(ExocalError):
    pass


###############################################################################
class ResultsError(ExocalError):
    pass
