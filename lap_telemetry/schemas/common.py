# lap_telemetry/schemas/common.py
"""Common response schemas."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


class HealthResponse(BaseModel):
    """Health check response."""
    status: str


class SectorTimesSchema(CamelModel):
    """Sector durations in seconds."""
    s1: float | None
    s2: float | None
    s3: float | None
