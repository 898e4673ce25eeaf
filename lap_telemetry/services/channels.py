"""Channel registry built from settings."""
from lap_telemetry.config import Settings
from lap_telemetry.models.channel import ChannelSpec

SPEED = "speed"
DISTANCE = "distance"
THROTTLE = "throttle"
BRAKE = "brake"
LATITUDE = "lat"
LONGITUDE = "lon"
ENGINE_RPM = "engine_rpm"
STEERING = "steering"

# Highest-rate channel (enforced by Settings); every aligned point is one of its samples
REFERENCE_CHANNEL = SPEED


def build_channel_specs(settings: Settings) -> dict[str, ChannelSpec]:
    """Describe every channel the pipeline reads, keyed by role."""
    return {
        SPEED: ChannelSpec(SPEED, settings.speed_table, settings.speed_hz, mandatory=True),
        DISTANCE: ChannelSpec(DISTANCE, settings.distance_table, settings.distance_hz, mandatory=True),
        THROTTLE: ChannelSpec(THROTTLE, settings.throttle_table, settings.input_hz),
        BRAKE: ChannelSpec(BRAKE, settings.brake_table, settings.input_hz),
        LATITUDE: ChannelSpec(LATITUDE, settings.latitude_table, settings.gps_hz),
        LONGITUDE: ChannelSpec(LONGITUDE, settings.longitude_table, settings.gps_hz),
        ENGINE_RPM: ChannelSpec(ENGINE_RPM, settings.rpm_table, settings.rpm_hz),
        STEERING: ChannelSpec(STEERING, settings.steering_table, settings.steering_hz, scale=settings.steering_scale),
    }


def sample_rates(specs: dict[str, ChannelSpec]) -> dict[str, float]:
    return {name: spec.sample_rate_hz for name, spec in specs.items()}
