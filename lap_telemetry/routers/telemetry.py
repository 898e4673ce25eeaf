"""Lap telemetry endpoint."""
from typing import BinaryIO

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.concurrency import run_in_threadpool

from lap_telemetry.config import Settings
from lap_telemetry.core.deps import get_app_settings
from lap_telemetry.core.exceptions import LapTelemetryException, http_error, invalid_sample_step
from lap_telemetry.core.logging import get_logger
from lap_telemetry.db import open_uploaded_store
from lap_telemetry.schemas.common import SectorTimesSchema
from lap_telemetry.schemas.telemetry import (
    LapTelemetryResponse,
    SelectedLapSchema,
    TelemetryPointSchema,
)
from lap_telemetry.services.channels import REFERENCE_CHANNEL
from lap_telemetry.services.telemetry_pipeline import LapTelemetryResult, build_lap_telemetry

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["Telemetry"])


def _build_telemetry(
    fileobj: BinaryIO,
    settings: Settings,
    lap_index: int | None,
    sample_step: int | None
) -> LapTelemetryResult:
    with open_uploaded_store(fileobj, settings) as store:
        return build_lap_telemetry(store, settings, lap_index=lap_index, sample_step=sample_step)


def _telemetry_response(result: LapTelemetryResult, file_name: str | None) -> LapTelemetryResponse:
    lap = result.lap
    selected = SelectedLapSchema(
        index=lap.lap_index,
        lap_end=lap.end_time,
        lap_start_time=lap.start_time,
        lap_end_time=lap.end_time_rel,
        lap_duration=lap.duration,
        sectors=SectorTimesSchema.model_validate(lap.sectors) if lap.sectors else None,
        speed_index_range=result.index_ranges[REFERENCE_CHANNEL].as_list(),
    )

    return LapTelemetryResponse(
        data=[TelemetryPointSchema.model_validate(point) for point in result.points],
        row_count=len(result.points),
        reference_sample_count=result.reference_sample_count,
        lap=selected,
        best_sectors=SectorTimesSchema.model_validate(result.best_sectors),
        hz=result.sample_rates,
        sample_step=result.sample_step,
        index_ranges={name: r.as_list() for name, r in result.index_ranges.items()},
        warnings=result.warnings,
        file_name=file_name,
    )


@router.post("/telemetry", response_model=LapTelemetryResponse)
async def get_lap_telemetry(
    file: UploadFile = File(..., description="Recorded session store (.duckdb)"),
    lap_index: int | None = Form(None, alias="lapIndex", description="0-based lap, fastest valid lap if omitted"),
    sample_step: int | None = Form(None, alias="sampleStep", description="Keep every Nth aligned sample"),
    settings: Settings = Depends(get_app_settings)
) -> LapTelemetryResponse:
    """
    Get aligned telemetry for one lap of an uploaded session.

    Speed, distance, pedals, GPS, RPM and steering are aligned onto the speed
    channel's samples and downsampled by ``sampleStep``.
    """
    if sample_step is not None and sample_step <= 0:
        raise invalid_sample_step(sample_step)

    logger.info(f"Lap telemetry request for {file.filename}, lap index {lap_index}")
    try:
        result = await run_in_threadpool(_build_telemetry, file.file, settings, lap_index, sample_step)
    except LapTelemetryException as e:
        logger.error(f"/api/telemetry error: {e.message}")
        raise http_error(e)

    return _telemetry_response(result, file.filename)
