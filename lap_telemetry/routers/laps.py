"""Lap list endpoint."""
import math
from typing import BinaryIO

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.concurrency import run_in_threadpool

from lap_telemetry.config import Settings
from lap_telemetry.core.deps import get_app_settings
from lap_telemetry.core.exceptions import LapTelemetryException, http_error
from lap_telemetry.core.logging import get_logger
from lap_telemetry.db import open_uploaded_store
from lap_telemetry.models.lap import LapRecord, LapTable
from lap_telemetry.schemas.common import SectorTimesSchema
from lap_telemetry.schemas.laps import LapListResponse, LapSummarySchema
from lap_telemetry.services.telemetry_pipeline import load_lap_table

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["Laps"])


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def _lap_summary(lap: LapRecord) -> LapSummarySchema:
    return LapSummarySchema(
        lap_index=lap.lap_index,
        lap_time=_finite_or_none(lap.duration),
        sectors=SectorTimesSchema.model_validate(lap.sectors) if lap.sectors else None,
        is_valid=lap.is_valid,
    )


def _load_laps(fileobj: BinaryIO, settings: Settings) -> LapTable:
    with open_uploaded_store(fileobj, settings) as store:
        return load_lap_table(store, settings)


@router.post("/laps", response_model=LapListResponse)
async def list_laps(
    file: UploadFile = File(..., description="Recorded session store (.duckdb)"),
    include_invalid: bool = Form(False, alias="includeInvalid"),
    settings: Settings = Depends(get_app_settings)
) -> LapListResponse:
    """
    List the laps of an uploaded session with the fastest lap and best sectors.

    Out-laps and pit laps are left out unless ``includeInvalid`` is set.
    """
    logger.info(f"Lap list request for {file.filename}")
    try:
        lap_table = await run_in_threadpool(_load_laps, file.file, settings)
    except LapTelemetryException as e:
        logger.error(f"/api/laps error: {e.message}")
        raise http_error(e)

    laps = lap_table.laps if include_invalid else lap_table.valid_laps
    logger.info(f"Lap count: {len(laps)}, best lap index: {lap_table.best_lap_index}")

    return LapListResponse(
        laps=[_lap_summary(lap) for lap in laps],
        best_lap_index=lap_table.best_lap_index,
        best_sectors=SectorTimesSchema.model_validate(lap_table.best_sectors),
        file_name=file.filename,
    )
