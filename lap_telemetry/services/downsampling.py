"""Fixed-stride decimation of aligned telemetry."""
from typing import Sequence, TypeVar

T = TypeVar("T")

DEFAULT_STRIDE = 10


def downsample(points: Sequence[T], stride: int = DEFAULT_STRIDE) -> list[T]:
    """
    Keep every ``stride``-th point, starting with the first.

    Points are returned unchanged (no averaging), so the output holds
    ``ceil(len(points) / stride)`` points.
    """
    if isinstance(stride, bool) or not isinstance(stride, int) or stride <= 0:
        raise ValueError(f"stride must be a positive integer, got {stride!r}")
    return list(points[::stride])
