"""
Multi-rate channel alignment.

Channels are recorded at different fixed rates with no shared sample clock, only
a common session start. Every sample of the reference channel becomes one
telemetry point; each other channel contributes its nearest sample at the same
elapsed time. Slower channels therefore repeat their value over several
consecutive points (no interpolation), which also gives the distance axis its
staircase shape.
"""
import math
from typing import Mapping

from lap_telemetry.core.exceptions import EmptyChannelError
from lap_telemetry.core.logging import get_logger
from lap_telemetry.models.channel import ChannelSlice, TelemetryPoint
from lap_telemetry.services.channels import (
    BRAKE,
    DISTANCE,
    ENGINE_RPM,
    LATITUDE,
    LONGITUDE,
    REFERENCE_CHANNEL,
    STEERING,
    THROTTLE,
)

logger = get_logger(__name__)


def nearest_sample_index(t_rel: float, sample_rate_hz: float, length: int) -> int:
    """
    Nearest sample of a channel at ``t_rel`` seconds into its window.

    Halves round up, and the result is clamped to ``[0, length - 1]`` since a
    fetched slice may stop short at the physical end of the channel.
    """
    return min(max(math.floor(t_rel * sample_rate_hz + 0.5), 0), length - 1)


def local_indices(
    reference_length: int,
    reference_hz: float,
    channel_hz: float,
    channel_length: int,
) -> list[int]:
    """Local sample index of a channel for every reference sample."""
    return [
        nearest_sample_index(i / reference_hz, channel_hz, channel_length)
        for i in range(reference_length)
    ]


def resample_channel(
    channel: ChannelSlice | None,
    reference_length: int,
    reference_hz: float,
    fill: float | None = None,
) -> list[float | None]:
    """
    Nearest-neighbour resample a channel slice onto the reference axis.

    Empty or absent channels yield ``fill`` for every point.
    """
    if _is_empty(channel):
        return [fill] * reference_length

    scale = channel.spec.scale
    values = channel.values
    indices = local_indices(reference_length, reference_hz, channel.spec.sample_rate_hz, len(values))
    return [_scaled(values[k], scale) for k in indices]


def _scaled(value: float | None, scale: float) -> float | None:
    return None if value is None else value * scale


def _is_empty(channel: ChannelSlice | None) -> bool:
    return channel is None or channel.is_empty


def _require(slices: Mapping[str, ChannelSlice], name: str) -> ChannelSlice:
    channel = slices.get(name)
    if _is_empty(channel):
        label = channel.spec.table if channel is not None else name
        raise EmptyChannelError(f"{label} channel is empty.", channel=name)
    return channel


def align_channels(
    lap_index: int,
    slices: Mapping[str, ChannelSlice],
    zero_fill_missing: bool = False,
) -> list[TelemetryPoint]:
    """
    Merge lap-windowed channel slices into one ordered sequence of points.

    Args:
        lap_index: Lap the slices belong to
        slices: Channel role -> slice, each already windowed to the lap
        zero_fill_missing: Report empty optional channels as 0 instead of None.
            GPS stays None either way.

    Returns:
        One TelemetryPoint per reference sample, in reference order

    Raises:
        EmptyChannelError: If the reference or distance slice is empty
    """
    reference = _require(slices, REFERENCE_CHANNEL)
    distance_slice = _require(slices, DISTANCE)

    ref_hz = reference.spec.sample_rate_hz
    ref_len = len(reference)
    fill = 0.0 if zero_fill_missing else None

    speed = [_scaled(value, reference.spec.scale) for value in reference.values]
    distance = resample_channel(distance_slice, ref_len, ref_hz)
    throttle = resample_channel(slices.get(THROTTLE), ref_len, ref_hz, fill)
    brake = resample_channel(slices.get(BRAKE), ref_len, ref_hz, fill)
    lat = resample_channel(slices.get(LATITUDE), ref_len, ref_hz)
    lon = resample_channel(slices.get(LONGITUDE), ref_len, ref_hz)
    engine_rpm = resample_channel(slices.get(ENGINE_RPM), ref_len, ref_hz, fill)
    steering = resample_channel(slices.get(STEERING), ref_len, ref_hz, fill)

    # Latitude without longitude (or the reverse) is not a position
    if _is_empty(slices.get(LATITUDE)) or _is_empty(slices.get(LONGITUDE)):
        lat = lon = [None] * ref_len

    points = [
        TelemetryPoint(
            index=i,
            time=i / ref_hz,
            distance=distance[i],
            speed=speed[i],
            throttle=throttle[i],
            brake=brake[i],
            lat=lat[i],
            lon=lon[i],
            lap_index=lap_index,
            engine_rpm=engine_rpm[i],
            steering_angle=steering[i],
        )
        for i in range(ref_len)
    ]
    logger.debug(f"Aligned {len(points)} points for lap {lap_index} on {reference.spec.table}")
    return points
