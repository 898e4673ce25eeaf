"""
Read access to a recorded session store.

Each telemetry channel is a single-column table (``value``) in sample order;
timing tables hold two numeric columns per lap. Only lap-windowed ranges of a
channel are ever read.
"""
from sqlalchemy import column, func, literal_column, select, table
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError

from lap_telemetry.config import Settings
from lap_telemetry.core.exceptions import MissingTableError
from lap_telemetry.core.logging import get_logger
from lap_telemetry.models.channel import ChannelSlice, ChannelSpec, SampleIndexRange
from lap_telemetry.models.lap import TimingTables

logger = get_logger(__name__)

VALUE_COLUMN = "value"


class SessionStore:
    """Timing tables and channel slices of one uploaded session."""

    def __init__(self, engine: Engine, settings: Settings):
        self.engine = engine
        self.settings = settings

    def _execute(self, stmt, table_name: str):
        # Covers connect too: an upload that is not a DuckDB file fails here
        try:
            with self.engine.connect() as conn:
                return conn.execute(stmt).all()
        except DBAPIError as e:
            raise MissingTableError(
                f"Cannot read table {table_name}: {e.orig}",
                table=table_name,
            ) from e

    def read_table(self, table_name: str) -> list[tuple]:
        """Read every row of a (small) timing table."""
        stmt = select(literal_column("*")).select_from(table(table_name))
        return [tuple(row) for row in self._execute(stmt, table_name)]

    def get_timing_tables(self) -> TimingTables:
        """
        Load the Lap Time / Last Sector1 / Last Sector2 tables.

        Raises:
            MissingTableError: If a table is absent or empty
        """
        tables = []
        for table_name in (
            self.settings.lap_time_table,
            self.settings.sector1_table,
            self.settings.sector2_table,
        ):
            rows = self.read_table(table_name)
            if not rows:
                raise MissingTableError(f"{table_name} table is empty.", table=table_name)
            tables.append(rows)
        return TimingTables(*tables)

    def get_channel_slice(self, spec: ChannelSpec, index_range: SampleIndexRange) -> ChannelSlice:
        """
        Fetch ``len(index_range)`` readings of a channel starting at ``index_range.start``.

        Fewer readings come back only when the window runs past the end of the
        channel.
        """
        stmt = (
            select(column(VALUE_COLUMN))
            .select_from(table(spec.table))
            .limit(len(index_range))
            .offset(index_range.start)
        )
        rows = self._execute(stmt, spec.table)
        values = tuple(float(row[0]) if row[0] is not None else None for row in rows)
        return ChannelSlice(spec=spec, index_range=index_range, values=values)

    def get_channel_length(self, spec: ChannelSpec) -> int:
        """Total number of stored samples of a channel."""
        stmt = select(func.count()).select_from(table(spec.table))
        return int(self._execute(stmt, spec.table)[0][0])
