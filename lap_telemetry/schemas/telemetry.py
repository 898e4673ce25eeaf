# lap_telemetry/schemas/telemetry.py
"""Telemetry-related schemas."""
from lap_telemetry.schemas.common import CamelModel, SectorTimesSchema


class TelemetryPointSchema(CamelModel):
    """Single aligned telemetry sample."""
    index: int
    time: float  # Seconds since lap start
    distance: float | None
    speed: float | None
    throttle: float | None
    brake: float | None
    lat: float | None
    lon: float | None
    lap_index: int
    engine_rpm: float | None
    steering_angle: float | None


class SelectedLapSchema(CamelModel):
    """Timing of the analysed lap."""
    index: int
    lap_end: float  # As stored in the lap time table
    lap_start_time: float  # Relative to session start
    lap_end_time: float
    lap_duration: float
    sectors: SectorTimesSchema | None
    speed_index_range: list[int]


class LapTelemetryResponse(CamelModel):
    """Aligned telemetry for one lap."""
    success: bool = True
    data: list[TelemetryPointSchema]
    row_count: int
    reference_sample_count: int
    lap: SelectedLapSchema
    best_sectors: SectorTimesSchema
    hz: dict[str, float]
    sample_step: int
    index_ranges: dict[str, list[int]]
    warnings: list[str] = []
    file_name: str | None = None
