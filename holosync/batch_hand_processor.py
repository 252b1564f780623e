#!/usr/bin/env python3
"""
batch_hand_processor.py

Batch processing script for a directory of hand-tracking CSV recordings.

For each recording it:
- Reads the CSV into hand frames
- Optionally keeps only one chirality
- Builds a summary (frame counts, time span, pinch distance)
- Stores the summary in a YAML file
- Generates visualization plots
- Optionally writes the filtered frames back to CSV

Usage:
    # Process every CSV in a directory with default settings
    python -m holosync.batch_hand_processor recordings/

    # Specify output directory and only right-hand frames
    python -m holosync.batch_hand_processor recordings/ -o results --chirality right

    # Disable visualization to speed up processing
    python -m holosync.batch_hand_processor recordings/ --no-visualize

Example output structure:
    results/
    ├── batch_summary.yaml
    ├── hand_data_pivoted_3/
    │   ├── hand_data_results.yaml
    │   └── plots/
    │       ├── fingertip_trajectories.png
    │       ├── indexFingerTip_over_time.png
    │       └── skeleton_frame_00000.png
    └── ...
"""

import argparse
import os
import sys

from tqdm import tqdm

from holosync.utils.batch_processor import (claim_output_dirname, discover_hand_csvs,
                                            generate_output_dirname, load_config,
                                            summarize_batch)
from holosync.utils.csv_handling import read_hands_from_csv, write_hands_to_csv
from holosync.utils.graph_utils import describe_plots, generate_all_hand_plots
from holosync.utils.hand_frames import filter_hands
from holosync.utils.results_handler import ResultsManager, create_result_from_hands

DEFAULT_OUTPUT_DIR = "results"


def process_recording(recording, output_dir, config, manager, output_name=None):
    """
    Process a single recording.

    Args:
        recording (dict): Entry from discover_hand_csvs()
        output_dir (str): Root output directory of the batch
        config (dict): Complete configuration
        manager (ResultsManager): Used to write the YAML results
        output_name (str, optional): Directory name under output_dir. Defaults
                                     to generate_output_dirname().

    Returns:
        dict: Batch entry for this recording ('status' is 'completed' or 'failed')
    """
    name = recording['recording_name']
    chirality = config['filter']['chirality']

    hands = filter_hands(read_hands_from_csv(recording['csv_path']), chirality)
    if not hands:
        return {
            'recording_name': name,
            'status': 'failed',
            'error': 'no frames loaded'
        }

    if output_name is None:
        output_name = generate_output_dirname(name, chirality)
    rec_output_dir = os.path.join(output_dir, output_name)
    os.makedirs(rec_output_dir, exist_ok=True)

    result = create_result_from_hands(name, hands,
                                      include_frames=config['output']['save_frame_results'])
    result.add_metadata('csv_path', recording['csv_path'])
    result.add_metadata('chirality_filter', chirality)

    if config['output']['export_csv']:
        export_path = write_hands_to_csv(hands, os.path.join(rec_output_dir, f"{name}.csv"))
        result.add_metadata('exported_csv', export_path)

    plots = []
    visualization = config['visualization']
    if visualization['enabled']:
        try:
            plots = generate_all_hand_plots(
                hands, os.path.join(rec_output_dir, 'plots'),
                trajectory_joint=visualization['trajectory_joint'],
                skeleton_frame_step=visualization['skeleton_frame_step'])
        except (OSError, ValueError) as e:
            print(f"Warning: Could not generate plots: {e}")
        result.add_metadata('plots', describe_plots(plots))

    if config['output']['save_results_yaml']:
        manager.save_results(result, rec_output_dir)

    return {
        'recording_name': name,
        'output_dir': rec_output_dir,
        'status': 'completed',
        'summary': result.summary
    }


def run_batch(recordings_dir, output_dir=DEFAULT_OUTPUT_DIR, config=None):
    """
    Process every CSV recording in a directory.

    Returns:
        dict: Batch summary, also written to <output_dir>/batch_summary.yaml

    Raises:
        ValueError: If the directory is missing or holds no CSV files
    """
    if config is None:
        config = load_config()

    print(f"\n{'='*80}")
    print("BATCH HAND-DATA PROCESSING")
    print(f"{'='*80}")
    print(f"Recordings: {recordings_dir}")
    print(f"Output:     {output_dir}")

    recordings = discover_hand_csvs(recordings_dir)
    os.makedirs(output_dir, exist_ok=True)
    manager = ResultsManager(output_dir)

    batch_results = []
    used_names = set()
    for recording in tqdm(recordings, desc="Recordings", unit="file"):
        output_name = claim_output_dirname(recording['recording_name'],
                                           config['filter']['chirality'], used_names)
        try:
            entry = process_recording(recording, output_dir, config, manager, output_name)
        except (OSError, ValueError) as e:
            entry = {
                'recording_name': recording['recording_name'],
                'status': 'failed',
                'error': str(e)
            }

        if entry['status'] == 'completed':
            tqdm.write(f"  ✓ {entry['recording_name']}: "
                       f"{entry['summary']['total_frames']} frame(s)")
        else:
            tqdm.write(f"  ✗ {entry['recording_name']}: {entry['error']}")
        batch_results.append(entry)

    batch_summary = summarize_batch(batch_results, config)

    summary_path = manager.save_batch_summary(batch_summary)

    print(f"\n{'='*80}")
    print("BATCH PROCESSING COMPLETE")
    print(f"{'='*80}")
    print(f"Completed: {batch_summary['completed_recordings']}/{batch_summary['total_recordings']}")
    print(f"Summary file: {summary_path}")

    return batch_summary


def main(argv=None):
    """Parse command-line arguments and run the batch."""
    parser = argparse.ArgumentParser(
        description="Batch summary and plotting of hand-tracking CSV recordings"
    )

    parser.add_argument('recordings_dir', help='Directory containing hand-data CSV files')
    parser.add_argument('-o', '--output', type=str, default=DEFAULT_OUTPUT_DIR,
                        help=f'Output directory (default: {DEFAULT_OUTPUT_DIR})')
    parser.add_argument('--config', type=str, default=None,
                        help='Path to configuration YAML file')
    parser.add_argument('--chirality', type=str, default=None,
                        help="Process only frames of this hand ('left' or 'right')")
    parser.add_argument('--no-visualize', action='store_true',
                        help='Disable visualization plots')
    parser.add_argument('--export-csv', action='store_true',
                        help='Write the processed frames of each recording to CSV')

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        if args.chirality:
            config['filter']['chirality'] = args.chirality
        if args.no_visualize:
            config['visualization']['enabled'] = False
        if args.export_csv:
            config['output']['export_csv'] = True

        summary = run_batch(args.recordings_dir, args.output, config)
    except (OSError, ValueError) as e:
        print(f"Fatal error during batch processing: {e}")
        return 1

    return 0 if summary['failed_recordings'] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
