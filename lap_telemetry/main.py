"""
LMU Lap Telemetry Backend - FastAPI Application
"""
# lap_telemetry/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lap_telemetry.config import get_settings
from lap_telemetry.core.logging import setup_logging, get_logger

import lap_telemetry.routers.health as health
import lap_telemetry.routers.laps as laps
import lap_telemetry.routers.telemetry as telemetry


# Setup logging
setup_logging()
logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(
        f"Channel rates (Hz): speed={settings.speed_hz:g} distance={settings.distance_hz:g} "
        f"input={settings.input_hz:g} gps={settings.gps_hz:g} rpm={settings.rpm_hz:g} "
        f"steering={settings.steering_hz:g}"
    )
    logger.info(f"Upload dir: {settings.upload_dir}")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    LMU Lap Telemetry Backend API

    Upload a recorded Le Mans Ultimate session (.duckdb) to:
    - list its laps with sector splits, fastest lap and best sectors
    - get one lap's speed, distance, pedal, GPS, RPM and steering channels
      aligned onto a single timeline and downsampled for charting
    """,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(laps.router)
app.include_router(telemetry.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "lap_telemetry.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
