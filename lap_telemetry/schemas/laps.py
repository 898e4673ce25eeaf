# lap_telemetry/schemas/laps.py
"""Lap list schemas."""
from lap_telemetry.schemas.common import CamelModel, SectorTimesSchema


class LapSummarySchema(CamelModel):
    """One lap of the session."""
    lap_index: int
    lap_time: float | None
    sectors: SectorTimesSchema | None
    is_valid: bool


class LapListResponse(CamelModel):
    """Lap list with best lap and best sectors."""
    success: bool = True
    laps: list[LapSummarySchema]
    best_lap_index: int | None
    best_sectors: SectorTimesSchema
    file_name: str | None = None
