import math

import pytest

from lap_telemetry.services.downsampling import downsample


def test_stride_ten_on_full_lap():
    """1200 aligned points with stride 10 -> 120 points, k-th output is input 10k"""
    points = list(range(1200))
    sampled = downsample(points, 10)

    assert len(sampled) == 120
    assert all(sampled[k] == points[10 * k] for k in range(120))


@pytest.mark.parametrize("length,stride", [(1201, 10), (5, 10), (1, 1), (0, 3), (99, 7)])
def test_output_length_is_ceiling(length, stride):
    """The first point is always kept and the tail is not padded"""
    sampled = downsample(list(range(length)), stride)

    assert len(sampled) == math.ceil(length / stride)


def test_points_are_not_copied_or_averaged():
    points = [object() for _ in range(25)]
    sampled = downsample(points, 5)

    assert all(a is b for a, b in zip(sampled, points[::5]))


def test_default_stride():
    assert len(downsample(list(range(100)))) == 10


@pytest.mark.parametrize("stride", [0, -1, 2.5, True])
def test_invalid_stride(stride):
    with pytest.raises(ValueError):
        downsample([1, 2, 3], stride)
