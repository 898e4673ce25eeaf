"""Lap timing records."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Sequence


class TimingTables(NamedTuple):
    """Raw rows of the three cumulative timing tables, in lap order."""

    lap_time_rows: Sequence[Sequence[Any]]  # (end_time, duration)
    sector1_rows: Sequence[Sequence[Any]]  # (lap_index, cumulative_s1)
    sector2_rows: Sequence[Sequence[Any]]  # (lap_index, cumulative_s2)


@dataclass(frozen=True, slots=True)
class SectorTimes:
    """Per-sector durations in seconds."""

    s1: float
    s2: float
    s3: float

    @classmethod
    def from_cumulative(cls, s1_cumulative: float, s2_cumulative: float, duration: float) -> SectorTimes:
        """Convert cumulative split times at sector boundaries into sector deltas."""
        s1 = s1_cumulative
        s2 = s2_cumulative - s1
        s3 = duration - s1 - s2
        return cls(s1=s1, s2=s2, s3=s3)

    @property
    def total(self) -> float:
        return self.s1 + self.s2 + self.s3


@dataclass(frozen=True, slots=True)
class BestSectors:
    """Fastest positive time seen for each sector; None when no lap qualifies."""

    s1: float | None = None
    s2: float | None = None
    s3: float | None = None


@dataclass(frozen=True, slots=True)
class LapRecord:
    """One lap reconstructed from the cumulative timing tables.

    ``end_time`` is the raw value stored in the lap time table. ``start_time``
    and ``end_time_rel`` are relative to the session zero-point (start of the
    first recorded lap), which is the clock the channels are sampled against.
    """

    lap_index: int
    end_time: float
    duration: float
    start_time: float
    sectors: SectorTimes | None

    @property
    def end_time_rel(self) -> float:
        return self.start_time + self.duration

    @property
    def is_valid(self) -> bool:
        """Complete laps only: out-laps and pit laps carry non-positive durations."""
        return math.isfinite(self.duration) and self.duration > 0

    def __repr__(self) -> str:
        return f"<LapRecord(lap={self.lap_index}, duration={self.duration:.3f}, start={self.start_time:.3f})>"


@dataclass(frozen=True, slots=True)
class LapTable:
    """Every lap of a session together with the best-lap summary."""

    laps: tuple[LapRecord, ...]
    best_lap_index: int | None
    best_sectors: BestSectors = field(default_factory=BestSectors)
    first_lap_offset: float = 0.0

    @property
    def valid_laps(self) -> list[LapRecord]:
        return [lap for lap in self.laps if lap.is_valid]

    @property
    def session_duration(self) -> float:
        """Nominal recording length, from session zero to the last lap end."""
        return self.laps[-1].end_time - self.first_lap_offset
