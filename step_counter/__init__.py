"""
Step Counter
============

Counts walking steps in tri-axial accelerometer (and gyroscope) recordings
by peak detection over the per-sample vector magnitude.

Core Modules:
- signal_functions: Magnitudes, mean/std statistics, extrema, column slicing
- step_detection: Step detectors and the count_steps entry point
- config: Detector parameters and YAML configuration
- data_loader: CSV recording loader
"""

from .signal_functions import *
from .step_detection import *
from .config import (
    AdaptiveWindowParams,
    ColumnRange,
    HysteresisParams,
    StepCounterConfig,
    load_config,
)

__version__ = "1.0.0"
