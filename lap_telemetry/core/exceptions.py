# lap_telemetry/core/exceptions.py
"""Custom exceptions."""
from fastapi import HTTPException, status


class LapTelemetryException(Exception):
    """Base exception for the lap telemetry pipeline.

    Context attributes (``table``, ``lap_index``, ``channel``) are set when known
    so callers can report exactly what failed.
    """

    def __init__(
        self,
        message: str,
        *,
        table: str | None = None,
        lap_index: int | None = None,
        channel: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.table = table
        self.lap_index = lap_index
        self.channel = channel


class MissingTableError(LapTelemetryException):
    """Raised when a required table is absent or empty."""
    pass


class InvalidTimingRowError(LapTelemetryException):
    """Raised when a timing row holds a missing or non-finite required value."""
    pass


class NoValidLapError(LapTelemetryException):
    """Raised when no lap has a positive finite duration."""
    pass


class InvalidLapIndexError(LapTelemetryException):
    """Raised when an explicit lap index is out of bounds."""
    pass


class InvalidLapWindowError(LapTelemetryException):
    """Raised when a lap's time window cannot be mapped to samples."""
    pass


class EmptyChannelError(LapTelemetryException):
    """Raised when a mandatory channel slice is empty after fetch."""
    pass


class SampleLimitExceededError(LapTelemetryException):
    """Raised when a channel window exceeds the per-channel sample ceiling."""
    pass


class PipelineTimeoutError(LapTelemetryException):
    """Raised when a request runs past its wall-clock budget."""
    pass


class RateMismatchError(LapTelemetryException):
    """Raised when a channel's stored length disagrees with its declared rate."""
    pass


_STATUS_BY_ERROR: dict[type[LapTelemetryException], int] = {
    InvalidLapIndexError: 404,
    SampleLimitExceededError: 413,
    PipelineTimeoutError: 504,
}


def http_error(exc: LapTelemetryException) -> HTTPException:
    """Create HTTPException for a pipeline error."""
    status_code = _STATUS_BY_ERROR.get(type(exc), 422)
    return HTTPException(status_code=status_code, detail=exc.message)


def invalid_sample_step(sample_step: int) -> HTTPException:
    """Create HTTPException for a non-positive sample step."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"sampleStep must be a positive integer, got {sample_step}"
    )
