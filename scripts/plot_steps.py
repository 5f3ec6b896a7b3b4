"""
Step Detection Plots
====================

One figure per recording:
    {stem}_steps.png
        Top    : accelerometer magnitude, global mean + std threshold,
                 sliding-window mean + 0.4 std threshold, counted peaks
        Bottom : gyroscope magnitude with its own mean + std threshold
                 (only when the recording has gyroscope columns)

Usage:
    python scripts/plot_steps.py data/walk01.csv
    python scripts/plot_steps.py data/ --out output/figures
    python scripts/plot_steps.py data/ --config step_counter.yaml --force
    python scripts/plot_steps.py data/ --no-header --json-logs

Skips figures that already exist unless --force is given.
"""

import sys
import argparse
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from step_counter.config import load_config
from step_counter.data_loader import load_sensor_csv, resolve_recordings
from step_counter.log_utils import setup_logging
from step_counter.signal_functions import (
    StepCounterError,
    local_peak_mask,
    sensor_magnitudes,
    series_statistics,
    sliding_window_statistics,
)
from step_counter.step_detection import count_steps_all

PROJECT_ROOT = Path(__file__).parent.parent
OUT_ROOT     = PROJECT_ROOT / 'output' / 'figures'

COL_ACC  = '#2980b9'   # blue
COL_GYR  = '#8e44ad'   # purple
COL_THR  = '#c0392b'   # red
COL_ADPT = '#27ae60'   # green


def plot_magnitudes(times, sensor_data, cfg, title, out_path):
    t = (times - times[0]) / 1000.0   # ms -> s

    acc = sensor_magnitudes(sensor_data, cfg.accel_columns.as_tuple())
    acc_mean, acc_std = series_statistics(acc)
    ad_mean, ad_std = sliding_window_statistics(acc, cfg.adaptive.window_size)
    ad_thr = ad_mean + cfg.adaptive.std_multiplier * ad_std

    has_gyro = sensor_data.shape[1] >= cfg.gyro_columns.end
    counts = count_steps_all(times, sensor_data, cfg)

    n_rows = 2 if has_gyro else 1
    fig, axes = plt.subplots(n_rows, 1, figsize=(13, 4 * n_rows), sharex=True, squeeze=False)
    counts_txt = '  '.join(f'{k}={v}' for k, v in counts.items())
    fig.suptitle(f'{title}\n{counts_txt}', fontsize=10, fontweight='bold')

    ax = axes[0, 0]
    peaks = local_peak_mask(acc) & (acc > acc_mean + acc_std)
    ax.plot(t, acc, color=COL_ACC, linewidth=0.8, label='|acc|')
    ax.axhline(acc_mean + acc_std, color=COL_THR, linestyle='--', linewidth=1.0,
               label=f'mean + std ({acc_mean + acc_std:.2f})')
    ax.plot(t, ad_thr, color=COL_ADPT, linewidth=1.0,
            label=f'window mean + {cfg.adaptive.std_multiplier} std')
    ax.plot(t[peaks], acc[peaks], 'v', color=COL_THR, markersize=4,
            label=f'peaks above threshold (n={int(peaks.sum())})')
    ax.set_ylabel('Acceleration magnitude')
    ax.legend(fontsize=8, loc='upper right', framealpha=0.7)
    ax.grid(alpha=0.3)

    if has_gyro:
        ax = axes[1, 0]
        gyr = sensor_magnitudes(sensor_data, cfg.gyro_columns.as_tuple())
        gyr_mean, gyr_std = series_statistics(gyr)
        gpeaks = local_peak_mask(gyr) & (gyr > gyr_mean + gyr_std)
        ax.plot(t, gyr, color=COL_GYR, linewidth=0.8, label='|gyro|')
        ax.axhline(gyr_mean + gyr_std, color=COL_THR, linestyle='--', linewidth=1.0,
                   label=f'mean + std ({gyr_mean + gyr_std:.2f})')
        ax.plot(t[gpeaks], gyr[gpeaks], 'v', color=COL_THR, markersize=4,
                label=f'peaks above threshold (n={int(gpeaks.sum())})')
        ax.set_ylabel('Gyroscope magnitude')
        ax.legend(fontsize=8, loc='upper right', framealpha=0.7)
        ax.grid(alpha=0.3)

    axes[-1, 0].set_xlabel('Time (s)')
    plt.tight_layout()
    fig.savefig(out_path, dpi=120, bbox_inches='tight')
    plt.close(fig)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Plot magnitude series and detected steps')
    parser.add_argument('paths', nargs='+', type=Path)
    parser.add_argument('--out', type=Path, default=OUT_ROOT)
    parser.add_argument('--config', type=Path, default=None)
    parser.add_argument('--force', action='store_true')
    parser.add_argument('--no-header', action='store_true')
    parser.add_argument('--json-logs', action='store_true')
    args = parser.parse_args(argv)

    cfg = load_config(args.config)
    if args.no_header:
        cfg = cfg.model_copy(update={'has_header': False})
    setup_logging(cfg.log_level, json_format=args.json_logs)
    args.out.mkdir(parents=True, exist_ok=True)

    recordings = resolve_recordings(args.paths)
    done = skipped = failed = 0

    for csv_path in recordings:
        out_path = args.out / f'{csv_path.stem}_steps.png'
        if out_path.exists() and not args.force:
            skipped += 1
            continue
        try:
            times, sensor_data = load_sensor_csv(
                csv_path, time_column=cfg.time_column, header=0 if cfg.has_header else None
            )
            plot_magnitudes(times, sensor_data, cfg, csv_path.name, out_path)
        except (FileNotFoundError, StepCounterError) as e:
            failed += 1
            print(f'  {csv_path.name}: {e}')
            continue
        done += 1
        print(f'  {csv_path.name}: OK')

    print(f'\n{"="*40}')
    print(f'Generated : {done}')
    print(f'Skipped   : {skipped}')
    print(f'Failed    : {failed}')
    print(f'Output    : {args.out}')
    print(f'{"="*40}')


if __name__ == '__main__':
    main()
