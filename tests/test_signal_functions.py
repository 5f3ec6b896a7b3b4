from __future__ import annotations

import math

import numpy as np
import pytest

from step_counter.signal_functions import (
    ColumnMismatchError,
    InvalidInputError,
    calculate_magnitude,
    calculate_magnitudes_for,
    calculate_mean,
    calculate_standard_deviation,
    get_columns,
    local_peak_mask,
    local_trough_mask,
    sensor_magnitudes,
    series_statistics,
    sliding_window_statistics,
    window_statistics,
)


def test_magnitude_pythagorean_triple() -> None:
    assert abs(calculate_magnitude(3.0, 4.0, 0.0) - 5.0) < 1e-9


def test_magnitude_nan_propagates() -> None:
    assert math.isnan(calculate_magnitude(float("nan"), 1.0, 1.0))


def test_magnitudes_for_rows() -> None:
    data = np.array([[3.0, 4.0, 0.0], [0.0, 0.0, 2.0], [1.0, 2.0, 2.0]])
    before = data.copy()
    mags = calculate_magnitudes_for(data)
    np.testing.assert_allclose(mags, [5.0, 2.0, 3.0])
    # fresh array, input untouched
    mags[0] = -1.0
    np.testing.assert_array_equal(data, before)


def test_magnitudes_for_accepts_lists() -> None:
    mags = calculate_magnitudes_for([[0.0, 0.0, 1.0]])
    assert mags.shape == (1,)
    assert mags[0] == 1.0


@pytest.mark.parametrize("shape", [(5, 2), (5, 4), (5,)])
def test_magnitudes_for_rejects_wrong_shape(shape) -> None:
    with pytest.raises(ColumnMismatchError):
        calculate_magnitudes_for(np.zeros(shape))


def test_magnitudes_for_rejects_empty() -> None:
    with pytest.raises(InvalidInputError):
        calculate_magnitudes_for(np.zeros((0, 3)))


def test_mean_and_sample_std() -> None:
    values = [1.0, 2.0, 3.0, 4.0, 5.0]
    mean = calculate_mean(values)
    assert mean == 3.0
    assert abs(calculate_standard_deviation(values, mean) - math.sqrt(2.5)) < 1e-12
    assert series_statistics(values) == (mean, calculate_standard_deviation(values, mean))


def test_mean_of_empty_series_fails() -> None:
    with pytest.raises(InvalidInputError):
        calculate_mean([])


def test_std_of_single_sample_fails() -> None:
    with pytest.raises(InvalidInputError):
        calculate_standard_deviation([4.0], 4.0)


def test_window_statistics_clamps_to_series() -> None:
    values = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    mean, std = window_statistics(values, -3, 2)
    assert mean == 1.5
    assert abs(std - math.sqrt(0.5)) < 1e-12

    mean, std = window_statistics(values, 3, 99)
    assert mean == 4.5

    assert window_statistics(values, -10, 10) == series_statistics(values)


def test_window_statistics_single_sample_window_fails() -> None:
    with pytest.raises(InvalidInputError):
        window_statistics(np.arange(5.0), 4, 10)


def test_sliding_window_matches_exact_windows() -> None:
    rng = np.random.default_rng(7)
    values = 9.81 + rng.normal(0.0, 1.5, 60)
    half_width = 5
    means, stds = sliding_window_statistics(values, half_width)
    for i in range(values.size):
        m, s = window_statistics(values, i - half_width, i + half_width)
        assert abs(means[i] - m) < 1e-9
        assert abs(stds[i] - s) < 1e-9


def test_sliding_window_single_sample_window_is_nan() -> None:
    means, stds = sliding_window_statistics(np.array([1.0, 2.0, 3.0]), 1)
    # window for index 0 is [0, 1)
    assert means[0] == 1.0
    assert math.isnan(stds[0])
    assert abs(stds[1] - math.sqrt(0.5)) < 1e-12


def test_local_extrema_are_strict_and_interior() -> None:
    series = np.array([0.0, 1.0, 0.0, 2.0, 2.0, 0.0, 3.0])
    np.testing.assert_array_equal(np.flatnonzero(local_peak_mask(series)), [1])

    series = np.array([3.0, 1.0, 2.0, 0.0, 0.0, 5.0])
    np.testing.assert_array_equal(np.flatnonzero(local_trough_mask(series)), [1])


def test_local_extrema_short_series() -> None:
    assert not local_peak_mask(np.array([1.0, 2.0])).any()
    assert not local_trough_mask(np.array([2.0])).any()


def test_get_columns_half_open() -> None:
    data = np.arange(12.0).reshape(2, 6)
    cols = get_columns(data, 3, 6)
    np.testing.assert_array_equal(cols, [[3.0, 4.0, 5.0], [9.0, 10.0, 11.0]])
    cols[0, 0] = -1.0
    assert data[0, 3] == 3.0


@pytest.mark.parametrize("start,end", [(0, 0), (4, 2), (4, 7), (-1, 2)])
def test_get_columns_rejects_bad_ranges(start, end) -> None:
    with pytest.raises(ColumnMismatchError):
        get_columns(np.zeros((4, 6)), start, end)


def test_sensor_magnitudes_requires_three_columns() -> None:
    data = np.ones((4, 6))
    np.testing.assert_allclose(sensor_magnitudes(data, (1, 4)), np.full(4, math.sqrt(3.0)))
    with pytest.raises(ColumnMismatchError):
        sensor_magnitudes(data, (0, 2))
