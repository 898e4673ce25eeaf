import pytest

from lap_telemetry.core.exceptions import InvalidLapWindowError
from lap_telemetry.models.channel import SampleIndexRange
from lap_telemetry.services.index_mapping import compute_index_range, compute_index_ranges


def test_ranges_follow_each_channel_rate():
    """A 31s-40s lap maps to different sample windows per rate"""
    ranges = compute_index_ranges(31.0, 40.0, {"speed": 100, "distance": 10, "throttle": 50})

    assert ranges["speed"] == SampleIndexRange(3100, 4000)
    assert ranges["distance"] == SampleIndexRange(310, 400)
    assert ranges["throttle"] == SampleIndexRange(1550, 2000)


def test_start_is_floored_and_clamped():
    """Fractional starts floor; negative starts clamp to sample 0"""
    assert compute_index_range(1.239, 2.0, 100) == SampleIndexRange(123, 200)
    assert compute_index_range(-0.5, 2.0, 10) == SampleIndexRange(0, 20)


def test_sub_sample_window_still_has_one_sample():
    """A window shorter than one sample period yields exactly one sample"""
    index_range = compute_index_range(1.001, 1.005, 10)

    assert index_range == SampleIndexRange(10, 11)
    assert len(index_range) == 1


@pytest.mark.parametrize("hz", [0.5, 1, 10, 50, 100, 333.3])
@pytest.mark.parametrize("start,end", [(0.0, 0.001), (12.34, 12.35), (31.0, 40.0), (99.999, 100.0)])
def test_end_always_after_start(hz, start, end):
    """Every increasing window maps to a non-empty range"""
    index_range = compute_index_range(start, end, hz)

    assert index_range.end > index_range.start >= 0


@pytest.mark.parametrize("start,end", [(float("nan"), 5.0), (0.0, float("inf")), (float("-inf"), 3.0)])
def test_unusable_window(start, end):
    """Non-finite windows are rejected with the lap index"""
    with pytest.raises(InvalidLapWindowError) as exc_info:
        compute_index_ranges(start, end, {"speed": 100}, lap_index=4)

    assert exc_info.value.lap_index == 4


@pytest.mark.parametrize("start,end", [(10.0, 10.0), (13.0, 12.0)])
def test_non_increasing_window_keeps_one_sample(start, end):
    """Zero or negative duration laps (out-laps) still map to one sample per channel"""
    ranges = compute_index_ranges(start, end, {"speed": 100, "distance": 10}, lap_index=1)

    assert ranges["speed"] == SampleIndexRange(int(start * 100), int(start * 100) + 1)
    assert ranges["distance"] == SampleIndexRange(int(start * 10), int(start * 10) + 1)


def test_rate_must_be_positive():
    with pytest.raises(ValueError):
        compute_index_ranges(0.0, 1.0, {"speed": 0})


def test_sample_index_range_rejects_empty():
    """SampleIndexRange is half-open and never empty"""
    with pytest.raises(ValueError):
        SampleIndexRange(5, 5)
    with pytest.raises(ValueError):
        SampleIndexRange(-1, 3)
    assert SampleIndexRange(3, 7).as_list() == [3, 7]
