"""
Map a lap's time window onto per-channel sample index ranges.
"""
import math
from typing import Mapping

from lap_telemetry.core.exceptions import InvalidLapWindowError
from lap_telemetry.models.channel import SampleIndexRange


def compute_index_range(start_time: float, end_time: float, sample_rate_hz: float) -> SampleIndexRange:
    """
    Compute the half-open sample window ``[start, end)`` for one channel.

    The range is never empty: a window shorter than one sample still yields one
    sample, at the cost of a possible one-sample overshoot.
    """
    start = max(0, math.floor(start_time * sample_rate_hz))
    end = max(start + 1, math.floor(end_time * sample_rate_hz))
    return SampleIndexRange(start=start, end=end)


def compute_index_ranges(
    start_time: float,
    end_time: float,
    sample_rates: Mapping[str, float],
    lap_index: int | None = None,
) -> dict[str, SampleIndexRange]:
    """
    Compute sample windows for every channel of a lap.

    Args:
        start_time: Lap start, seconds since session zero
        end_time: Lap end, seconds since session zero
        sample_rates: Channel name -> sample rate in Hz
        lap_index: Lap the window belongs to, for error context

    Returns:
        Channel name -> SampleIndexRange

    Raises:
        InvalidLapWindowError: If either end of the window is not finite
    """
    # A finite window that does not increase (out-lap) still maps to one sample
    if not (math.isfinite(start_time) and math.isfinite(end_time)):
        raise InvalidLapWindowError(
            f"Lap {lap_index} has no usable time window ({start_time} -> {end_time})",
            lap_index=lap_index,
        )

    ranges = {}
    for name, hz in sample_rates.items():
        if not hz > 0:
            raise ValueError(f"Channel {name} needs a positive sample rate, got {hz}")
        ranges[name] = compute_index_range(start_time, end_time, hz)
    return ranges
