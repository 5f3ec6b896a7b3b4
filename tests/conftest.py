from __future__ import annotations

import logging

import numpy as np
import pytest


N_SAMPLES = 300
ACCEL_PEAKS = (50, 150, 250)
GYRO_PEAKS = (80, 200)


def add_bumps(series: np.ndarray, centers, height: float = 2.0) -> np.ndarray:
    """Add narrow Gaussian bumps (sigma = 1 sample, truncated at 4 samples)."""
    d = np.arange(-4, 5)
    bump = height * np.exp(-(d ** 2) / 2.0)
    out = series.copy()
    for c in centers:
        out[c + d] += bump
    return out


@pytest.fixture
def accel_mags() -> np.ndarray:
    return add_bumps(np.ones(N_SAMPLES), ACCEL_PEAKS)


@pytest.fixture
def gyro_mags() -> np.ndarray:
    return add_bumps(np.full(N_SAMPLES, 0.5), GYRO_PEAKS)


@pytest.fixture
def times() -> np.ndarray:
    return np.arange(N_SAMPLES, dtype=float) * 10.0


@pytest.fixture
def walk_matrix(accel_mags: np.ndarray, gyro_mags: np.ndarray) -> np.ndarray:
    """6-column recording: accel on z (cols 0-2), gyro on x (cols 3-5)."""
    data = np.zeros((N_SAMPLES, 6))
    data[:, 2] = accel_mags
    data[:, 3] = gyro_mags
    return data


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Scripts reconfigure the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
