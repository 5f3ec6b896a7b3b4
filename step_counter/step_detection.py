"""
Step Detection
==============

Peak-based step counters over accelerometer (and gyroscope) magnitude series.

Every detector takes the elapsed-time vector and one or two magnitude series
and returns an integer step count. The time vector is accepted so all
detectors share one call shape; none of the counts depend on it.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Dict

import numpy as np

from .config import (
    DEFAULT_ADAPTIVE_PARAMS,
    HysteresisParams,
    StepCounterConfig,
)
from .signal_functions import (
    local_peak_mask,
    local_trough_mask,
    sensor_magnitudes,
    series_statistics,
    window_statistics,
)


logger = logging.getLogger(__name__)


class Strategy(str, enum.Enum):
    SIMPLE_PEAK = "simple_peak"
    HYSTERESIS = "hysteresis"
    PEAK_TROUGH = "peak_trough"
    ADAPTIVE_WINDOW = "adaptive_window"
    ADAPTIVE_NARROW = "adaptive_narrow"
    DUAL_SENSOR = "dual_sensor"


def count_steps_simple_peak(times, accel_mags):
    """
    Count local peaks above mean + std of the whole series

    Parameters:
    -----------
    times : array
        Elapsed time per sample (unused)
    accel_mags : array
        Accelerometer magnitude series

    Returns:
    --------
    steps : int
    """
    mags = np.asarray(accel_mags, dtype=np.float64)
    mean, std = series_statistics(mags)

    peaks = local_peak_mask(mags)
    return int(np.count_nonzero(peaks & (mags > mean + std)))


def count_steps_hysteresis(times, accel_mags, params=None):
    """
    Credit a step once a peak above mean + std is followed by a drop below
    drop_coefficient * peak

    Parameters:
    -----------
    times : array
        Elapsed time per sample (unused)
    accel_mags : array
        Accelerometer magnitude series
    params : HysteresisParams, optional
        Default drop coefficient is 0.8

    Returns:
    --------
    steps : int
    """
    params = params or HysteresisParams()
    mags = np.asarray(accel_mags, dtype=np.float64)
    mean, std = series_statistics(mags)
    threshold = mean + std
    coefficient = params.drop_coefficient

    step_counter = 0
    below_lower_thresh = False
    current_highest_peak = 0.0

    for i in range(1, mags.size - 1):
        value = mags[i]
        if value > threshold:
            below_lower_thresh = False
            if value > current_highest_peak:
                current_highest_peak = value
        if value < coefficient * current_highest_peak:
            below_lower_thresh = True
        if below_lower_thresh:
            step_counter += 1
            current_highest_peak = 0.0
            below_lower_thresh = False

    return step_counter


def count_steps_peak_trough(times, accel_mags):
    """
    Count indices where the latest peak-to-trough amplitude exceeds mean + std

    The comparison runs at every scanned index and is never reset, so a
    wide gap keeps counting until a new extremum narrows it. Known quirk,
    kept as is.

    Parameters:
    -----------
    times : array
        Elapsed time per sample (unused)
    accel_mags : array
        Accelerometer magnitude series

    Returns:
    --------
    steps : int
    """
    mags = np.asarray(accel_mags, dtype=np.float64)
    mean, std = series_statistics(mags)
    threshold = mean + std

    peaks = local_peak_mask(mags)
    troughs = local_trough_mask(mags)

    step_counter = 0
    current_max_peak = mags[0]
    current_min_trough = mags[0]

    # Last interior index is not scanned
    for i in range(1, mags.size - 2):
        if peaks[i]:
            current_max_peak = mags[i]
        if troughs[i]:
            current_min_trough = mags[i]
        if (current_max_peak - current_min_trough) > threshold:
            step_counter += 1

    return step_counter


def count_steps_adaptive_window(times, accel_mags, params=None):
    """
    Count local peaks above a threshold taken from the surrounding window

    For each local peak i the threshold is mean + k * std over
    accel_mags[i - W : i + W] (clamped). After a counted step the scan
    skips `spacing` samples. With skip_after_any_peak it also skips after
    a peak that stays under the threshold.

    Parameters:
    -----------
    times : array
        Elapsed time per sample (unused)
    accel_mags : array
        Accelerometer magnitude series
    params : AdaptiveWindowParams, optional
        window_size W, std_multiplier k, spacing.
        Default is W=1000, k=0.4, spacing=25, skip only after counted steps

    Returns:
    --------
    steps : int
    """
    params = params or DEFAULT_ADAPTIVE_PARAMS
    mags = np.asarray(accel_mags, dtype=np.float64)
    n = mags.size
    half_width = params.window_size

    peaks = local_peak_mask(mags)

    step_counter = 0
    i = 1
    while i < n - 1:
        # Window statistics only matter at peaks
        if peaks[i]:
            win_mean, win_std = window_statistics(mags, i - half_width, i + half_width)
            if mags[i] > win_mean + params.std_multiplier * win_std:
                step_counter += 1
                i += params.spacing
            elif params.skip_after_any_peak:
                i += params.spacing
        i += 1

    return step_counter


def count_steps_dual_sensor(times, accel_mags, gyro_mags):
    """
    Average of the simple peak count on accelerometer and gyroscope

    Each sensor is thresholded with its own statistics. The sum is halved
    with integer division, so an odd total drops one step.
    """
    accel_steps = count_steps_simple_peak(times, accel_mags)
    gyro_steps = count_steps_simple_peak(times, gyro_mags)
    return (accel_steps + gyro_steps) // 2


@dataclass(frozen=True)
class DetectorSpec:
    key: Strategy
    label: str
    needs_gyro: bool
    compute: Callable[..., int]


def _simple_peak(times, accel_mags, gyro_mags, config):
    return count_steps_simple_peak(times, accel_mags)


def _hysteresis(times, accel_mags, gyro_mags, config):
    return count_steps_hysteresis(times, accel_mags, config.hysteresis)


def _peak_trough(times, accel_mags, gyro_mags, config):
    return count_steps_peak_trough(times, accel_mags)


def _adaptive_window(times, accel_mags, gyro_mags, config):
    return count_steps_adaptive_window(times, accel_mags, config.adaptive)


def _adaptive_narrow(times, accel_mags, gyro_mags, config):
    return count_steps_adaptive_window(times, accel_mags, config.adaptive_narrow)


def _dual_sensor(times, accel_mags, gyro_mags, config):
    return count_steps_dual_sensor(times, accel_mags, gyro_mags)


DETECTORS: Dict[Strategy, DetectorSpec] = {
    Strategy.SIMPLE_PEAK: DetectorSpec(Strategy.SIMPLE_PEAK, "Simple peak", False, _simple_peak),
    Strategy.HYSTERESIS: DetectorSpec(Strategy.HYSTERESIS, "Hysteresis peak", False, _hysteresis),
    Strategy.PEAK_TROUGH: DetectorSpec(Strategy.PEAK_TROUGH, "Peak-trough amplitude", False, _peak_trough),
    Strategy.ADAPTIVE_WINDOW: DetectorSpec(Strategy.ADAPTIVE_WINDOW, "Adaptive window", False, _adaptive_window),
    Strategy.ADAPTIVE_NARROW: DetectorSpec(Strategy.ADAPTIVE_NARROW, "Adaptive window (narrow)", False, _adaptive_narrow),
    Strategy.DUAL_SENSOR: DetectorSpec(Strategy.DUAL_SENSOR, "Dual sensor average", True, _dual_sensor),
}


def get_detector(strategy):
    """Look up a detector by Strategy member or its string value."""
    try:
        key = Strategy(strategy)
    except ValueError:
        known = ", ".join(s.value for s in Strategy)
        raise ValueError(f"Unknown strategy {strategy!r}, expected one of: {known}")
    return DETECTORS[key]


def count_steps(times, sensor_data, strategy=None, config=None):
    """
    Count steps in a raw sensor matrix with one detector

    Parameters:
    -----------
    times : array (N,)
        Elapsed time per row
    sensor_data : array (NxM)
        Rows are chronological samples. Accelerometer and gyroscope axes
        are taken from config.accel_columns / config.gyro_columns
    strategy : Strategy or str, optional
        Defaults to config.strategy
    config : StepCounterConfig, optional

    Returns:
    --------
    steps : int
    """
    config = config or StepCounterConfig()
    spec = get_detector(strategy if strategy is not None else config.strategy)

    accel_mags = sensor_magnitudes(sensor_data, config.accel_columns.as_tuple())
    gyro_mags = None
    if spec.needs_gyro:
        gyro_mags = sensor_magnitudes(sensor_data, config.gyro_columns.as_tuple())

    steps = spec.compute(times, accel_mags, gyro_mags, config)
    logger.debug("%s: %d steps over %d samples", spec.label, steps, accel_mags.size)
    return steps


def count_steps_all(times, sensor_data, config=None):
    """
    Run every detector on the same recording

    Detectors needing a gyroscope are skipped when the matrix has no
    columns for it.

    Returns:
    --------
    counts : dict
        Strategy value -> step count
    """
    config = config or StepCounterConfig()
    data = np.asarray(sensor_data, dtype=np.float64)
    n_columns = data.shape[1] if data.ndim == 2 else 0

    counts = {}
    for key, spec in DETECTORS.items():
        if spec.needs_gyro and config.gyro_columns.end > n_columns:
            logger.debug("Skipping %s: matrix has %d columns", spec.label, n_columns)
            continue
        counts[key.value] = count_steps(times, data, key, config)
    return counts
