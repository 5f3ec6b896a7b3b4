"""
Batch Step Counting
===================

Counts steps in every CSV recording given on the command line.

Usage:
    python scripts/count_steps.py data/walk01.csv                   # default detector
    python scripts/count_steps.py data/ --strategy hysteresis       # every CSV in a folder
    python scripts/count_steps.py data/ --all --out output/steps.csv
    python scripts/count_steps.py data/ --config step_counter.yaml
    python scripts/count_steps.py data/ --no-header --json-logs --log-level DEBUG

Recordings that fail to load or are too short are reported and skipped.
"""

import sys
import logging
import argparse
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pandas as pd

from step_counter.config import load_config
from step_counter.data_loader import load_sensor_csv, resolve_recordings
from step_counter.log_utils import setup_logging
from step_counter.signal_functions import StepCounterError
from step_counter.step_detection import Strategy, count_steps, count_steps_all

logger = logging.getLogger('count_steps')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Count steps in IMU CSV recordings')
    parser.add_argument('paths', nargs='+', type=Path,
                        help='CSV files or directories of CSV files')
    parser.add_argument('--strategy', choices=[s.value for s in Strategy], default=None,
                        help='Detector to run (default: from config, else simple_peak)')
    parser.add_argument('--all', action='store_true',
                        help='Run every detector and report one column per detector')
    parser.add_argument('--config', type=Path, default=None,
                        help='YAML configuration file')
    parser.add_argument('--out', type=Path, default=None,
                        help='Optional CSV file for the result table')
    parser.add_argument('--log-level', default=None,
                        help='Logging level (default: from config)')
    parser.add_argument('--json-logs', action='store_true',
                        help='Emit log records as JSON lines')
    parser.add_argument('--no-header', action='store_true',
                        help='Recordings have no header row')
    return parser.parse_args(argv)


def count_one_recording(csv_path, cfg, strategy, run_all):
    times, sensor_data = load_sensor_csv(
        csv_path, time_column=cfg.time_column, header=0 if cfg.has_header else None
    )
    row = {'file': csv_path.name, 'samples': len(times)}
    if run_all:
        row.update(count_steps_all(times, sensor_data, cfg))
    else:
        key = strategy or cfg.strategy
        row[key] = count_steps(times, sensor_data, key, cfg)
    logger.debug('Counted %s', csv_path.name, extra={'recording': csv_path.name, 'samples': len(times)})
    return row


def main(argv=None):
    args = parse_args(argv)
    cfg = load_config(args.config)
    if args.no_header:
        cfg = cfg.model_copy(update={'has_header': False})
    setup_logging(args.log_level or cfg.log_level, json_format=args.json_logs)

    recordings = resolve_recordings(args.paths)
    if not recordings:
        print('No CSV recordings found.')
        return 1

    print('Counting steps...')
    print(f'  Recordings : {len(recordings)}')
    print(f'  Detector   : {"all" if args.all else (args.strategy or cfg.strategy)}\n')

    rows = []
    failed = 0
    for csv_path in recordings:
        try:
            row = count_one_recording(csv_path, cfg, args.strategy, args.all)
        except (FileNotFoundError, StepCounterError) as e:
            failed += 1
            print(f'  {csv_path.name}: {e}')
            continue
        rows.append(row)

    if rows:
        table = pd.DataFrame(rows)
        print(table.to_string(index=False))
        if args.out is not None:
            args.out.parent.mkdir(parents=True, exist_ok=True)
            table.to_csv(args.out, index=False)
            print(f'\n[OK] Saved -> {args.out}')

    print(f'\n{"="*40}')
    print(f'Counted : {len(rows)}')
    print(f'Failed  : {failed}')
    print(f'{"="*40}')
    return 0 if rows else 1


if __name__ == '__main__':
    sys.exit(main())
