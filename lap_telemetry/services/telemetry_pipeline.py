"""
Lap telemetry pipeline.

Resolve lap -> map time window to per-channel sample ranges -> fetch only those
slices -> align onto the reference channel -> downsample.
"""
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Protocol

from lap_telemetry.config import Settings
from lap_telemetry.core.exceptions import (
    MissingTableError,
    PipelineTimeoutError,
    RateMismatchError,
    SampleLimitExceededError,
)
from lap_telemetry.core.logging import get_logger
from lap_telemetry.models.channel import ChannelSlice, ChannelSpec, SampleIndexRange, TelemetryPoint
from lap_telemetry.models.lap import BestSectors, LapRecord, LapTable, TimingTables
from lap_telemetry.services.channel_alignment import align_channels
from lap_telemetry.services.channels import REFERENCE_CHANNEL, build_channel_specs, sample_rates
from lap_telemetry.services.downsampling import downsample
from lap_telemetry.services.index_mapping import compute_index_ranges
from lap_telemetry.services.lap_timing import parse_lap_table, select_lap

logger = get_logger(__name__)


class TelemetryStore(Protocol):
    """What the pipeline needs from a session store."""

    def get_timing_tables(self) -> TimingTables:
        ...

    def get_channel_slice(self, spec: ChannelSpec, index_range: SampleIndexRange) -> ChannelSlice:
        ...

    def get_channel_length(self, spec: ChannelSpec) -> int:
        ...


@dataclass(frozen=True)
class LapTelemetryResult:
    """Aligned, downsampled telemetry of one lap plus its timing context."""

    lap: LapRecord
    best_sectors: BestSectors
    points: list[TelemetryPoint]
    reference_sample_count: int
    index_ranges: dict[str, SampleIndexRange]
    slice_lengths: dict[str, int]
    sample_rates: dict[str, float]
    sample_step: int
    warnings: list[str] = field(default_factory=list)


class Deadline:
    """Wall-clock budget for one request."""

    def __init__(self, budget_sec: float):
        self.budget_sec = budget_sec
        self.expires_at = time.monotonic() + budget_sec

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    def check(self, stage: str) -> None:
        if time.monotonic() >= self.expires_at:
            raise PipelineTimeoutError(
                f"Request exceeded its {self.budget_sec:.1f}s budget during {stage}"
            )


def load_lap_table(store: TelemetryStore, settings: Settings) -> LapTable:
    """Read the timing tables and resolve every lap."""
    return parse_lap_table(
        store.get_timing_tables(),
        lap_time_table=settings.lap_time_table,
        sector1_table=settings.sector1_table,
        sector2_table=settings.sector2_table,
    )


def enforce_sample_limit(
    ranges: dict[str, SampleIndexRange],
    specs: dict[str, ChannelSpec],
    max_samples: int,
    lap_index: int,
) -> None:
    """Refuse windows larger than the per-channel ceiling before reading anything."""
    for name, index_range in ranges.items():
        if len(index_range) > max_samples:
            raise SampleLimitExceededError(
                f"Lap {lap_index} spans {len(index_range)} samples of {specs[name].table}, "
                f"limit is {max_samples}",
                lap_index=lap_index,
                channel=name,
            )


def check_channel_rates(
    store: TelemetryStore,
    specs: dict[str, ChannelSpec],
    session_duration: float,
    settings: Settings,
) -> list[str]:
    """
    Compare each channel's stored length with ``session_duration * rate``.

    Returns:
        Human-readable mismatch messages (``warn`` mode)

    Raises:
        RateMismatchError: On the first mismatch in ``error`` mode
    """
    if settings.rate_check == "off" or session_duration <= 0:
        return []

    messages = []
    for name, spec in specs.items():
        try:
            actual = store.get_channel_length(spec)
        except MissingTableError:
            if spec.mandatory:
                raise
            continue
        expected = session_duration * spec.sample_rate_hz
        if abs(actual - expected) <= settings.rate_tolerance * expected:
            continue

        message = (
            f"{spec.table}: {actual} samples stored, ~{expected:.0f} expected "
            f"at {spec.sample_rate_hz:g} Hz over {session_duration:.1f}s"
        )
        if settings.rate_check == "error":
            raise RateMismatchError(message, channel=name, table=spec.table)
        logger.warning(f"Rate mismatch - {message}")
        messages.append(message)
    return messages


def _fetch_one(store: TelemetryStore, spec: ChannelSpec, index_range: SampleIndexRange) -> ChannelSlice:
    try:
        return store.get_channel_slice(spec, index_range)
    except MissingTableError:
        if spec.mandatory:
            raise
        logger.warning(f"Optional channel table {spec.table} missing, treating as empty")
        return ChannelSlice(spec=spec, index_range=index_range, values=())


def fetch_channel_slices(
    store: TelemetryStore,
    specs: dict[str, ChannelSpec],
    ranges: dict[str, SampleIndexRange],
    workers: int,
    deadline: Deadline,
) -> dict[str, ChannelSlice]:
    """
    Fetch the lap window of every channel.

    Windows are independent and read-only, so with ``workers > 1`` they are read
    concurrently. The result is keyed by channel, so ordering is unaffected.
    """
    if workers <= 1:
        slices = {}
        for name, spec in specs.items():
            deadline.check(f"fetch of {spec.table}")
            slices[name] = _fetch_one(store, spec, ranges[name])
        return slices

    executor = ThreadPoolExecutor(max_workers=min(workers, len(specs)), thread_name_prefix="channel-fetch")
    try:
        futures = {
            name: executor.submit(_fetch_one, store, spec, ranges[name])
            for name, spec in specs.items()
        }
        slices = {}
        for name, future in futures.items():
            try:
                slices[name] = future.result(timeout=deadline.remaining())
            except FutureTimeoutError:
                raise PipelineTimeoutError(
                    f"Request exceeded its {deadline.budget_sec:.1f}s budget "
                    f"while fetching {specs[name].table}",
                    channel=name,
                ) from None
        return slices
    finally:
        executor.shutdown(wait=True, cancel_futures=True)


def build_lap_telemetry(
    store: TelemetryStore,
    settings: Settings,
    lap_index: int | None = None,
    sample_step: int | None = None,
) -> LapTelemetryResult:
    """
    Run the full pipeline for one lap of a session.

    Args:
        store: Session store to read from
        settings: Channel tables/rates and pipeline limits
        lap_index: Explicit lap, or None for the fastest valid lap
        sample_step: Downsampling stride, defaults to ``settings.sample_step``

    Returns:
        LapTelemetryResult
    """
    deadline = Deadline(settings.request_timeout_sec)
    step = settings.sample_step if sample_step is None else sample_step
    specs = build_channel_specs(settings)
    rates = sample_rates(specs)

    lap_table = load_lap_table(store, settings)
    lap = select_lap(lap_table, lap_index)
    logger.info(
        f"Selected lap {lap.lap_index}: start={lap.start_time:.3f}s "
        f"end={lap.end_time_rel:.3f}s duration={lap.duration:.3f}s sectors={lap.sectors}"
    )

    ranges = compute_index_ranges(lap.start_time, lap.end_time_rel, rates, lap_index=lap.lap_index)
    range_summary = {name: r.as_list() for name, r in ranges.items()}
    logger.info(f"Index ranges: {range_summary}")
    enforce_sample_limit(ranges, specs, settings.max_samples_per_channel, lap.lap_index)

    deadline.check("rate check")
    warnings = check_channel_rates(store, specs, lap_table.session_duration, settings)

    slices = fetch_channel_slices(store, specs, ranges, settings.fetch_workers, deadline)
    slice_lengths = {name: len(channel) for name, channel in slices.items()}
    logger.info(f"Slice lengths: {slice_lengths}")

    deadline.check("alignment")
    aligned = align_channels(lap.lap_index, slices, zero_fill_missing=settings.zero_fill_missing)
    points = downsample(aligned, step)
    logger.info(
        f"Telemetry built. Original {slices[REFERENCE_CHANNEL].spec.table} samples: "
        f"{len(aligned)}, sampled points: {len(points)}"
    )

    return LapTelemetryResult(
        lap=lap,
        best_sectors=lap_table.best_sectors,
        points=points,
        reference_sample_count=len(aligned),
        index_ranges=ranges,
        slice_lengths=slice_lengths,
        sample_rates=rates,
        sample_step=step,
        warnings=warnings,
    )
