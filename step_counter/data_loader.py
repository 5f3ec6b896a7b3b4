"""
Data Loader
===========

Reads sensor recordings from CSV files into the (times, sensor_data) pair
consumed by the step detectors.

Expected layout: one row per sample in chronological order, one column of
elapsed time (milliseconds) and the sensor axes in the remaining columns,
e.g. time, ax, ay, az, gx, gy, gz.
"""

import numpy as np
import pandas as pd
from pathlib import Path

from .signal_functions import InvalidInputError


def load_sensor_csv(csv_path, time_column=0, header='infer'):
    """
    Load one recording

    Parameters:
    -----------
    csv_path : Path or str
        CSV file
    time_column : int
        Position of the elapsed-time column
    header : int, 'infer' or None
        Passed through to pandas.read_csv; None for headerless files

    Returns:
    --------
    times : array (N,)
    sensor_data : array (NxM)
        Every column except the time column, in file order

    Raises:
    -------
    FileNotFoundError if the file does not exist
    InvalidInputError if the file is empty, malformed or non-numeric
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"No recording at {csv_path}")

    try:
        df = pd.read_csv(csv_path, header=header)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise InvalidInputError(f"{csv_path.name} could not be parsed: {e}")
    df = df.dropna(axis=1, how='all')  # trailing separators

    if len(df) == 0:
        raise InvalidInputError(f"{csv_path.name} contains no samples")
    if time_column >= df.shape[1]:
        raise InvalidInputError(
            f"{csv_path.name} has {df.shape[1]} columns, "
            f"no time column at index {time_column}"
        )

    try:
        values = df.apply(pd.to_numeric, errors='raise').values.astype(np.float64)
    except (ValueError, TypeError) as e:
        raise InvalidInputError(f"{csv_path.name} contains non-numeric data: {e}")

    times = values[:, time_column].copy()
    sensor_data = np.delete(values, time_column, axis=1)

    return times, sensor_data


def list_recordings(directory):
    """Sorted CSV files directly inside directory"""
    return sorted(Path(directory).glob('*.csv'))


def resolve_recordings(paths):
    """
    Expand a mix of files and directories into a flat list of CSV files
    """
    recordings = []
    for p in paths:
        p = Path(p)
        if p.is_dir():
            recordings.extend(list_recordings(p))
        else:
            recordings.append(p)
    return recordings
