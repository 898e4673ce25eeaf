"""
Lap timing resolution.

Rebuilds per-lap records from the cumulative ``Lap Time`` / ``Last Sector1`` /
``Last Sector2`` tables and picks the lap to analyse.
"""
import math
from typing import Any, Sequence

from lap_telemetry.core.exceptions import (
    InvalidLapIndexError,
    InvalidTimingRowError,
    MissingTableError,
    NoValidLapError,
)
from lap_telemetry.core.logging import get_logger
from lap_telemetry.models.lap import BestSectors, LapRecord, LapTable, SectorTimes, TimingTables

logger = get_logger(__name__)

LAP_TIME_TABLE = "Lap Time"
SECTOR1_TABLE = "Last Sector1"
SECTOR2_TABLE = "Last Sector2"


def _to_float(value: Any) -> float | None:
    """Convert a raw cell to float; None when missing or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _cell(rows: Sequence[Sequence[Any]], row_index: int, column: int) -> Any:
    if row_index >= len(rows):
        return None
    row = rows[row_index]
    if row is None or len(row) <= column:
        return None
    return row[column]


def _finite_cell(
    rows: Sequence[Sequence[Any]],
    row_index: int,
    column: int,
    table: str,
    label: str,
) -> float:
    value = _to_float(_cell(rows, row_index, column))
    if value is None or not math.isfinite(value):
        raise InvalidTimingRowError(
            f"{table} row {row_index}: {label} is missing or not finite",
            table=table,
            lap_index=row_index,
        )
    return value


def _sectors_for_lap(
    tables: TimingTables,
    lap_index: int,
    duration: float,
    sector1_table: str,
    sector2_table: str,
) -> SectorTimes | None:
    """
    Derive sector durations for one lap.

    Valid laps must have finite cumulative splits. Incomplete laps may lack them,
    in which case no sectors are reported for that lap.
    """
    if not math.isfinite(duration):
        return None

    valid = duration > 0
    s1_cum = _to_float(_cell(tables.sector1_rows, lap_index, 1))
    s2_cum = _to_float(_cell(tables.sector2_rows, lap_index, 1))

    for value, table, label in (
        (s1_cum, sector1_table, "cumulative sector 1 time"),
        (s2_cum, sector2_table, "cumulative sector 2 time"),
    ):
        if value is None or not math.isfinite(value):
            if valid:
                raise InvalidTimingRowError(
                    f"{table} row {lap_index}: {label} is missing or not finite",
                    table=table,
                    lap_index=lap_index,
                )
            return None

    return SectorTimes.from_cumulative(s1_cum, s2_cum, duration)


def find_fastest_lap(laps: Sequence[LapRecord]) -> int | None:
    """Index of the shortest valid lap; the first one wins on ties."""
    best_index = None
    best_duration = math.inf
    for lap in laps:
        if lap.is_valid and lap.duration < best_duration:
            best_duration = lap.duration
            best_index = lap.lap_index
    return best_index


def compute_best_sectors(laps: Sequence[LapRecord]) -> BestSectors:
    """Fastest positive finite time per sector across valid laps."""
    best = {"s1": math.inf, "s2": math.inf, "s3": math.inf}
    for lap in laps:
        if not lap.is_valid or lap.sectors is None:
            continue
        for name in best:
            value = getattr(lap.sectors, name)
            if math.isfinite(value) and 0 < value < best[name]:
                best[name] = value

    return BestSectors(**{name: (value if math.isfinite(value) else None) for name, value in best.items()})


def parse_lap_table(
    tables: TimingTables,
    *,
    lap_time_table: str = LAP_TIME_TABLE,
    sector1_table: str = SECTOR1_TABLE,
    sector2_table: str = SECTOR2_TABLE,
) -> LapTable:
    """
    Build lap records from the three parallel timing tables.

    Args:
        tables: Raw rows, indexed in parallel by lap order
        lap_time_table: Table name used in error messages
        sector1_table: Table name used in error messages
        sector2_table: Table name used in error messages

    Returns:
        LapTable with every recorded lap, the fastest valid lap and best sectors

    Raises:
        MissingTableError: If any of the three tables is empty
        InvalidTimingRowError: If a required value is missing or non-finite
    """
    for rows, table in (
        (tables.lap_time_rows, lap_time_table),
        (tables.sector1_rows, sector1_table),
        (tables.sector2_rows, sector2_table),
    ):
        if not rows:
            raise MissingTableError(f"{table} table is empty.", table=table)

    # The lap time table is relative to an arbitrary recording start; the first
    # lap's start is the zero-point the channels are sampled against.
    first_end = _finite_cell(tables.lap_time_rows, 0, 0, lap_time_table, "lap end time")
    first_duration = _finite_cell(tables.lap_time_rows, 0, 1, lap_time_table, "lap duration")
    first_lap_offset = first_end - first_duration

    laps = []
    for i in range(len(tables.lap_time_rows)):
        end_time = _finite_cell(tables.lap_time_rows, i, 0, lap_time_table, "lap end time")
        duration = _to_float(_cell(tables.lap_time_rows, i, 1))
        if duration is None:
            raise InvalidTimingRowError(
                f"{lap_time_table} row {i}: lap duration is missing",
                table=lap_time_table,
                lap_index=i,
            )

        laps.append(
            LapRecord(
                lap_index=i,
                end_time=end_time,
                duration=duration,
                start_time=end_time - duration - first_lap_offset,
                sectors=_sectors_for_lap(tables, i, duration, sector1_table, sector2_table),
            )
        )

    lap_table = LapTable(
        laps=tuple(laps),
        best_lap_index=find_fastest_lap(laps),
        best_sectors=compute_best_sectors(laps),
        first_lap_offset=first_lap_offset,
    )
    logger.info(
        f"Parsed {len(laps)} laps ({len(lap_table.valid_laps)} valid), "
        f"best lap index: {lap_table.best_lap_index}"
    )
    return lap_table


def select_lap(lap_table: LapTable, lap_index: int | None = None) -> LapRecord:
    """
    Pick the lap to analyse.

    An explicit index is honoured even for invalid laps so out-laps can be
    inspected. Without one, the fastest valid lap is used.

    Raises:
        InvalidLapIndexError: If the explicit index is out of bounds
        NoValidLapError: If no index is given and no lap is valid
    """
    if lap_index is not None:
        if not 0 <= lap_index < len(lap_table.laps):
            raise InvalidLapIndexError(
                f"Lap index {lap_index} out of range (session has {len(lap_table.laps)} laps)",
                lap_index=lap_index,
            )
        return lap_table.laps[lap_index]

    if lap_table.best_lap_index is None:
        raise NoValidLapError("No valid lap found.")
    return lap_table.laps[lap_table.best_lap_index]
