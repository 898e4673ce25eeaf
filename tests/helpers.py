"""Shared test data: a three-lap session and stores serving it."""
from pathlib import Path

from lap_telemetry.core.exceptions import MissingTableError
from lap_telemetry.models.channel import ChannelSlice, ChannelSpec, SampleIndexRange
from lap_telemetry.models.lap import TimingTables

# (end_time, duration): laps end at 10s, 25s and 40s; lap 2 is the fastest
LAP_TIME_ROWS = [(10.0, 10.0), (25.0, 12.0), (40.0, 9.0)]
SECTOR1_ROWS = [(0, 3.0), (1, 4.0), (2, 3.0)]
SECTOR2_ROWS = [(0, 7.0), (1, 8.0), (2, 6.0)]

SESSION_SECONDS = 40

# table -> (sample rate, value factor); sample k holds k * factor
CHANNELS = {
    "Ground Speed": (100, 1.0),
    "Lap Dist": (10, 10.0),
    "Throttle Pos": (50, 0.001),
    "Brake Pos": (50, 0.002),
    "GPS Latitude": (10, 0.01),
    "GPS Longitude": (10, 0.02),
    "Engine RPM": (100, 2.0),
    "Steering Pos": (100, 0.0001),
}


def timing_tables() -> TimingTables:
    return TimingTables(list(LAP_TIME_ROWS), list(SECTOR1_ROWS), list(SECTOR2_ROWS))


def channel_values(table: str, length: int | None = None) -> list[float]:
    hz, factor = CHANNELS[table]
    if length is None:
        length = SESSION_SECONDS * hz
    return [k * factor for k in range(length)]


class FakeSessionStore:
    """In-memory session store that records which windows were read."""

    def __init__(self, timing: TimingTables | None = None, channels: dict[str, list[float]] | None = None):
        self.timing = timing if timing is not None else timing_tables()
        if channels is None:
            channels = {table: channel_values(table) for table in CHANNELS}
        self.channels = channels
        self.fetched: dict[str, SampleIndexRange] = {}

    def get_timing_tables(self) -> TimingTables:
        return self.timing

    def get_channel_slice(self, spec: ChannelSpec, index_range: SampleIndexRange) -> ChannelSlice:
        if spec.table not in self.channels:
            raise MissingTableError(f"Cannot read table {spec.table}", table=spec.table)
        self.fetched[spec.table] = index_range
        values = tuple(self.channels[spec.table][index_range.start:index_range.end])
        return ChannelSlice(spec=spec, index_range=index_range, values=values)

    def get_channel_length(self, spec: ChannelSpec) -> int:
        if spec.table not in self.channels:
            raise MissingTableError(f"Cannot read table {spec.table}", table=spec.table)
        return len(self.channels[spec.table])


def write_session_db(path: Path, skip_tables: tuple[str, ...] = ()) -> Path:
    """Write the test session as a DuckDB file."""
    import duckdb

    con = duckdb.connect(str(path))
    try:
        for table, rows in (
            ("Lap Time", LAP_TIME_ROWS),
            ("Last Sector1", SECTOR1_ROWS),
            ("Last Sector2", SECTOR2_ROWS),
        ):
            con.execute(f'CREATE TABLE "{table}" (ts DOUBLE, value DOUBLE)')
            con.executemany(f'INSERT INTO "{table}" VALUES (?, ?)', [list(row) for row in rows])

        for table, (hz, factor) in CHANNELS.items():
            if table in skip_tables:
                continue
            con.execute(
                f'CREATE TABLE "{table}" AS '
                f'SELECT CAST(i * {factor} AS DOUBLE) AS value '
                f'FROM range({SESSION_SECONDS * hz}) r(i) ORDER BY i'
            )
    finally:
        con.close()
    return path
