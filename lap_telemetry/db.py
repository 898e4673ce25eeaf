"""
Session store lifecycle using SQLAlchemy 2.x over DuckDB files.

Uploaded stores are written to a temp file, attached read-only, and both the
engine and the file are released on every exit path.
"""
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

from lap_telemetry.config import Settings
from lap_telemetry.core.logging import get_logger
from lap_telemetry.services.session_store import SessionStore

logger = get_logger(__name__)


def create_store_engine(db_file: str | Path, echo: bool = False) -> Engine:
    """Create a read-only engine for a DuckDB session file."""
    return create_engine(
        f"duckdb:///{Path(db_file).resolve().as_posix()}",
        connect_args={"read_only": True},
        poolclass=NullPool,
        echo=echo
    )


def save_upload(fileobj: BinaryIO, upload_dir: str | Path) -> Path:
    """
    Copy an uploaded session store into ``upload_dir``.

    Returns:
        Path of the temp file; the caller owns its removal
    """
    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        dir=directory, prefix="lmu_", suffix=".duckdb", delete=False
    ) as tmp:
        try:
            shutil.copyfileobj(fileobj, tmp)
        except Exception:
            tmp.close()
            Path(tmp.name).unlink(missing_ok=True)
            raise
    return Path(tmp.name)


@contextmanager
def open_session_store(db_file: str | Path, settings: Settings) -> Generator[SessionStore, None, None]:
    """
    Open a session store for the duration of a block.

    Usage:
        with open_session_store(path, settings) as store:
            tables = store.get_timing_tables()
    """
    engine = create_store_engine(db_file, echo=settings.debug)
    try:
        yield SessionStore(engine, settings)
    finally:
        engine.dispose()


@contextmanager
def open_uploaded_store(fileobj: BinaryIO, settings: Settings) -> Generator[SessionStore, None, None]:
    """Save an upload to a temp file, open it, and remove the file afterwards."""
    db_file = save_upload(fileobj, settings.upload_dir)
    logger.debug(f"Saved upload to {db_file}")
    try:
        with open_session_store(db_file, settings) as store:
            yield store
    finally:
        db_file.unlink(missing_ok=True)
        logger.debug(f"Removed {db_file}")
