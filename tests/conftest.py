import pytest

from lap_telemetry.config import Settings
from lap_telemetry.services.channels import build_channel_specs

from helpers import FakeSessionStore, write_session_db


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment, sequential fetch, no rate check."""
    return Settings(
        _env_file=None,
        upload_dir=str(tmp_path / "uploads"),
        fetch_workers=1,
        rate_check="off",
    )


@pytest.fixture
def channel_specs(settings):
    return build_channel_specs(settings)


@pytest.fixture
def fake_store():
    return FakeSessionStore()


@pytest.fixture
def session_db(tmp_path):
    """Path of a DuckDB file holding the three-lap test session."""
    return write_session_db(tmp_path / "session.duckdb")
