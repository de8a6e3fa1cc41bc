"""Errors raised by the preview engine."""


class PreviewError(Exception):
    """Base class for preview engine errors."""


class SourceUnavailableError(PreviewError):
    """A reference source failed to answer: network error or non-success status.

    The resolution chain recovers from this by falling through to the next stage.
    """

    def __init__(self, endpoint: str, reason: str, status_code: int | None = None):
        self.endpoint = endpoint
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{endpoint} unavailable: {reason}")
