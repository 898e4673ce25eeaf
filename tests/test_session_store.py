import io

import pytest

from lap_telemetry.core.exceptions import MissingTableError
from lap_telemetry.db import open_session_store, open_uploaded_store, save_upload
from lap_telemetry.models.channel import ChannelSpec, SampleIndexRange

from helpers import write_session_db


def test_timing_tables(session_db, settings):
    """Timing tables come back as rows in lap order"""
    with open_session_store(session_db, settings) as store:
        tables = store.get_timing_tables()

    assert [tuple(row) for row in tables.lap_time_rows] == [(10.0, 10.0), (25.0, 12.0), (40.0, 9.0)]
    assert [row[1] for row in tables.sector1_rows] == [3.0, 4.0, 3.0]
    assert [row[1] for row in tables.sector2_rows] == [7.0, 8.0, 6.0]


def test_channel_slice_reads_window(session_db, settings, channel_specs):
    """A slice holds exactly the requested window"""
    with open_session_store(session_db, settings) as store:
        channel = store.get_channel_slice(channel_specs["speed"], SampleIndexRange(3100, 4000))

    assert len(channel) == 900
    assert channel.values[0] == 3100.0
    assert channel.values[-1] == 3999.0


def test_channel_slice_stops_at_channel_end(session_db, settings, channel_specs):
    """Windows past the last sample return what exists"""
    with open_session_store(session_db, settings) as store:
        channel = store.get_channel_slice(channel_specs["distance"], SampleIndexRange(390, 420))

    assert len(channel) == 10
    assert channel.values[-1] == pytest.approx(3990.0)


def test_channel_length(session_db, settings, channel_specs):
    with open_session_store(session_db, settings) as store:
        assert store.get_channel_length(channel_specs["throttle"]) == 2000


def test_missing_table(session_db, settings):
    """Unknown tables surface as MissingTableError naming the table"""
    spec = ChannelSpec("boost", "Turbo Boost", 100)

    with open_session_store(session_db, settings) as store:
        with pytest.raises(MissingTableError) as exc_info:
            store.get_channel_slice(spec, SampleIndexRange(0, 10))
    assert exc_info.value.table == "Turbo Boost"


def test_missing_timing_table(tmp_path, settings):
    db_file = write_session_db(tmp_path / "partial.duckdb")
    renamed = settings.model_copy(update={"sector2_table": "Last Sector9"})

    with open_session_store(db_file, renamed) as store:
        with pytest.raises(MissingTableError) as exc_info:
            store.get_timing_tables()
    assert exc_info.value.table == "Last Sector9"


def test_uploaded_store_removes_temp_file(session_db, settings, tmp_path):
    """The temp copy of an upload is removed on success and on error"""
    upload_dir = tmp_path / "uploads"

    with open(session_db, "rb") as upload:
        with open_uploaded_store(upload, settings) as store:
            assert len(list(upload_dir.iterdir())) == 1
            store.get_timing_tables()
    assert list(upload_dir.iterdir()) == []

    with open(session_db, "rb") as upload:
        with pytest.raises(MissingTableError):
            with open_uploaded_store(upload, settings) as store:
                store.read_table("No Such Table")
    assert list(upload_dir.iterdir()) == []


def test_failed_upload_copy_leaves_no_file(tmp_path):
    """A read error halfway through an upload removes the partial copy"""

    class BrokenUpload(io.RawIOBase):
        def __init__(self):
            self.reads = 0

        def readable(self):
            return True

        def read(self, size=-1):
            self.reads += 1
            if self.reads > 1:
                raise OSError("connection reset")
            return b"\x00" * 16

    upload_dir = tmp_path / "uploads"

    with pytest.raises(OSError, match="connection reset"):
        save_upload(BrokenUpload(), upload_dir)
    assert list(upload_dir.iterdir()) == []
