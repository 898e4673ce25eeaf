"""Channel descriptions, sample windows and aligned telemetry points."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ChannelSpec:
    """
    One fixed-rate scalar channel of a recorded session.

    Sample ``k`` of a channel was taken ``k / sample_rate_hz`` seconds after
    the session start; channels carry no timestamps of their own.
    """

    name: str
    table: str
    sample_rate_hz: float
    mandatory: bool = False
    scale: float = 1.0

    def __post_init__(self) -> None:
        if not self.sample_rate_hz > 0:
            raise ValueError(f"Channel {self.name} needs a positive sample rate, got {self.sample_rate_hz}")


@dataclass(frozen=True, slots=True)
class SampleIndexRange:
    """Half-open ``[start, end)`` window of sample indices."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"Range start must be >= 0, got {self.start}")
        if self.end <= self.start:
            raise ValueError(f"Range end must be greater than start, got [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def as_list(self) -> list[int]:
        return [self.start, self.end]


@dataclass(frozen=True, slots=True)
class ChannelSlice:
    """Readings of one channel restricted to a sample window."""

    spec: ChannelSpec
    index_range: SampleIndexRange
    values: tuple[float | None, ...]  # None marks a NULL reading

    def __len__(self) -> int:
        return len(self.values)

    @property
    def is_empty(self) -> bool:
        return not self.values


@dataclass(frozen=True, slots=True)
class TelemetryPoint:
    """One row of the aligned lap telemetry, indexed by the reference channel."""

    index: int
    time: float
    distance: float | None
    speed: float | None
    throttle: float | None
    brake: float | None
    lat: float | None
    lon: float | None
    lap_index: int
    engine_rpm: float | None
    steering_angle: float | None
