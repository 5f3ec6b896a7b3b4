import logging

import numpy as np
from scipy.signal import argrelextrema


logger = logging.getLogger(__name__)


class StepCounterError(ValueError):
    """Base class for input-contract violations."""


class InvalidInputError(StepCounterError):
    """Series too short for the requested statistic."""


class ColumnMismatchError(StepCounterError):
    """Sensor matrix or column range does not have the expected shape."""


def calculate_magnitude(x, y, z):
    """
    Euclidean norm of a 3-component vector
    """
    return np.sqrt(x * x + y * y + z * z)


def calculate_magnitudes_for(sensor_data):
    """
    Compute the magnitude of every row of a 3-axis sensor matrix

    Parameters:
    -----------
    sensor_data : array (Nx3)
        One row per sample, one column per sensor axis

    Returns:
    --------
    mags : array (N,)
        New array, mags[i] is the norm of row i
    """
    data = np.asarray(sensor_data, dtype=np.float64)
    if data.ndim != 2 or data.shape[1] != 3:
        raise ColumnMismatchError(
            f"Expected an Nx3 sensor matrix, got shape {data.shape}"
        )
    if data.shape[0] == 0:
        raise InvalidInputError("Sensor matrix has no rows")

    mags = calculate_magnitude(data[:, 0], data[:, 1], data[:, 2])
    return np.array(mags, dtype=np.float64)


def calculate_mean(arr):
    """
    Arithmetic mean of a 1D series
    """
    arr = np.asarray(arr, dtype=np.float64)
    if arr.size == 0:
        raise InvalidInputError("Cannot compute the mean of an empty series")
    return float(np.sum(arr) / arr.size)


def calculate_standard_deviation(arr, mean):
    """
    Sample standard deviation (N-1 divisor) around a pre-computed mean

    Parameters:
    -----------
    arr : array
        1D series, at least 2 elements
    mean : float
        Mean of arr (see calculate_mean)

    Returns:
    --------
    std : float
    """
    arr = np.asarray(arr, dtype=np.float64)
    if arr.size < 2:
        raise InvalidInputError(
            f"Sample standard deviation needs at least 2 values, got {arr.size}"
        )
    total = np.sum((arr - mean) ** 2) / (arr.size - 1)
    return float(np.sqrt(total))


def series_statistics(arr):
    """
    (mean, std) pair over a whole series
    """
    mean = calculate_mean(arr)
    return mean, calculate_standard_deviation(arr, mean)


def window_statistics(arr, start, end):
    """
    (mean, std) over the half-open window [start, end), clamped to the series

    Parameters:
    -----------
    arr : array
        1D series
    start, end : int
        Window bounds; may fall outside [0, len(arr)]

    Returns:
    --------
    mean, std : float
    """
    arr = np.asarray(arr, dtype=np.float64)
    start = max(int(start), 0)
    end = min(int(end), arr.size)
    return series_statistics(arr[start:end])


def sliding_window_statistics(arr, half_width):
    """
    Per-index (mean, std) over windows [i - half_width, i + half_width)

    Vectorised with prefix sums, so values can differ from
    window_statistics in the last bits. Meant for display, not detection.

    Parameters:
    -----------
    arr : array
        1D series, at least 2 elements
    half_width : int
        Half window size in samples (>= 1)

    Returns:
    --------
    means, stds : arrays (N,)
        NaN std where a clamped window holds a single sample
    """
    arr = np.asarray(arr, dtype=np.float64)
    n = arr.size
    if n < 2:
        raise InvalidInputError(
            f"Sliding statistics need at least 2 values, got {n}"
        )
    if half_width < 1:
        raise ValueError(f"half_width must be >= 1, got {half_width}")

    idx = np.arange(n)
    starts = np.clip(idx - half_width, 0, n)
    ends = np.clip(idx + half_width, 0, n)
    counts = (ends - starts).astype(np.float64)

    # Shift by the global mean to keep the sum-of-squares well conditioned
    shifted = arr - arr.mean()
    csum = np.concatenate([[0.0], np.cumsum(shifted)])
    csum_sq = np.concatenate([[0.0], np.cumsum(shifted ** 2)])

    win_sum = csum[ends] - csum[starts]
    win_sum_sq = csum_sq[ends] - csum_sq[starts]

    means = win_sum / counts
    with np.errstate(divide='ignore', invalid='ignore'):
        var = (win_sum_sq - counts * means ** 2) / (counts - 1)
    stds = np.sqrt(np.clip(var, 0.0, None))
    stds[counts < 2] = np.nan

    return means + arr.mean(), stds


def local_peak_mask(arr):
    """
    True where a sample is strictly greater than both neighbours.
    Endpoints are never peaks.
    """
    return _extrema_mask(arr, np.greater)


def local_trough_mask(arr):
    """
    True where a sample is strictly less than both neighbours.
    Endpoints are never troughs.
    """
    return _extrema_mask(arr, np.less)


def _extrema_mask(arr, comparator):
    arr = np.asarray(arr, dtype=np.float64)
    mask = np.zeros(arr.size, dtype=bool)
    if arr.size < 3:
        return mask

    # mode='clip' compares the endpoints with themselves, which never passes
    (indices,) = argrelextrema(arr, comparator, order=1, mode='clip')
    mask[indices] = True
    return mask


def get_columns(sensor_data, start, end):
    """
    Copy of the half-open column range [start, end) of a sensor matrix

    Parameters:
    -----------
    sensor_data : array (NxM)
    start : int
        First column (inclusive)
    end : int
        Last column (exclusive)

    Returns:
    --------
    columns : array (N x (end - start))
    """
    data = np.asarray(sensor_data, dtype=np.float64)
    if data.ndim != 2:
        raise ColumnMismatchError(
            f"Expected a 2D sensor matrix, got {data.ndim} dimension(s)"
        )
    if start < 0 or end <= start or end > data.shape[1]:
        raise ColumnMismatchError(
            f"Column range [{start}, {end}) is invalid for a matrix "
            f"with {data.shape[1]} columns"
        )
    return data[:, start:end].copy()


def sensor_magnitudes(sensor_data, column_range):
    """
    Slice one sensor's 3 columns and return its magnitude series
    """
    start, end = column_range
    columns = get_columns(sensor_data, start, end)
    logger.debug("Magnitudes for columns [%d, %d) over %d samples",
                 start, end, columns.shape[0])
    return calculate_magnitudes_for(columns)
