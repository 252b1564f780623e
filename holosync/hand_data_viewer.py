#!/usr/bin/env python3
"""
hand_data_viewer.py

This script reads a pivoted hand-tracking CSV and lists its frames on the
console: the frame index, the monotonic timestamp, the chirality and the
positions of the five fingertips.

- The first CSV row is a header.
- Each data row has: t_mono, t_wall, chirality, then px,py,pz,qx,qy,qz,qw
  for each of the 26 hand joints.
- Rows with fewer than two columns are ignored; unparsable numbers read as 0.

Usage:
    python -m holosync.hand_data_viewer "path/to/hand_data_pivoted 3.csv" [options]

Options:
    --max-frames N       Load at most N frames
    --chirality SIDE     Show only 'left' or 'right' frames
    --frame N            Print every joint of frame N
    --config PATH        YAML configuration file
    --plot               Save fingertip/skeleton plots
    --output DIR         Output directory for plots and exports
    --export-csv         Write the loaded (filtered) frames back to CSV
"""

import argparse
import os
import sys

from holosync.utils.batch_processor import load_config
from holosync.utils.csv_handling import read_hands_from_csv, write_hands_to_csv
from holosync.utils.graph_utils import generate_all_hand_plots
from holosync.utils.hand_frames import filter_hands, pinch_distance
from holosync.utils.hand_model import JOINT_NAMES, Hand

DEFAULT_CSV_NAME = "hand_data_pivoted 3"


# ---------------------------
# Console formatting
# ---------------------------
def format_position(position, precision=3):
    return f"({position.x:.{precision}f}, {position.y:.{precision}f}, {position.z:.{precision}f})"


def format_frame(index: int, hand: Hand, timestamp_precision=2, position_precision=3):
    """
    Render one frame as listing lines.

    Returns:
        list: Lines of text, without trailing newlines
    """
    lines = [
        f"Frame {index}",
        f"  - Timestamp: {hand.t_mono:.{timestamp_precision}f}",
        f"  - Chirality: {hand.chirality}",
    ]

    tips = hand.fingertip_positions()
    if tips:
        lines.append("  Finger Tip Positions (X, Y, Z):")
        width = max(len(label) for label in tips) + 1
        for label, position in tips.items():
            lines.append(f"    - {(label + ':').ljust(width)} "
                         f"{format_position(position, position_precision)}")

    return lines


def format_frame_detail(index: int, hand: Hand, position_precision=3):
    """Render every joint of one frame, position and orientation."""
    lines = [
        f"Frame {index}",
        f"  t_mono:    {hand.t_mono}",
        f"  t_wall:    {hand.t_wall}",
        f"  chirality: {hand.chirality}",
        f"  joints:    {len(hand.joints)}/{len(JOINT_NAMES)}",
    ]

    pinch = pinch_distance(hand)
    if pinch is not None:
        lines.append(f"  pinch distance: {pinch:.{position_precision}f}")

    for joint_name in JOINT_NAMES:
        joint = hand.joints.get(joint_name)
        if joint is None:
            lines.append(f"  {joint_name:<30} missing")
            continue
        q = joint.orientation
        lines.append(f"  {joint_name:<30} pos={format_position(joint.position, position_precision)} "
                     f"quat=({q.x:.4f}, {q.y:.4f}, {q.z:.4f}, {q.w:.4f})")

    return lines


def print_frames(hands, timestamp_precision=2, position_precision=3, max_listed=None):
    """Print the frame listing."""
    print(f"\n{'='*70}")
    print("Hand Data Frames")
    print(f"{'='*70}")

    listed = hands if max_listed is None else hands[:max_listed]
    for index, hand in enumerate(listed):
        for line in format_frame(index, hand, timestamp_precision, position_precision):
            print(line)
        print()

    if len(listed) < len(hands):
        print(f"... {len(hands) - len(listed)} more frame(s) not shown")


def main(argv=None):
    """Main function."""
    parser = argparse.ArgumentParser(
        description="List the frames of a hand-tracking CSV recording",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  holosync-view "hand_data_pivoted 3.csv"
  holosync-view recording.csv --chirality right --max-frames 100
  holosync-view recording.csv --frame 1
  holosync-view recording.csv --plot --output plots/
        """
    )

    parser.add_argument('csv_file', nargs='?', default=DEFAULT_CSV_NAME,
                        help=f'Path to the hand-data CSV (default: "{DEFAULT_CSV_NAME}")')
    parser.add_argument('--max-frames', type=int, default=None,
                        help='Maximum number of frames to load (default: all)')
    parser.add_argument('--chirality', type=str, default=None,
                        help="Show only frames of this hand ('left' or 'right')")
    parser.add_argument('--frame', type=int, default=None,
                        help='Print every joint of this frame index')
    parser.add_argument('--config', type=str, default=None,
                        help='Path to configuration YAML file')
    parser.add_argument('--plot', action='store_true',
                        help='Save fingertip trajectory and skeleton plots')
    parser.add_argument('--output', type=str, default=None,
                        help='Output directory for plots and exports (default: CSV directory)')
    parser.add_argument('--export-csv', action='store_true',
                        help='Write the loaded frames to <output>/<name>_filtered.csv')

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    display = config['display']
    chirality = args.chirality or config['filter']['chirality']

    hands = read_hands_from_csv(args.csv_file, max_frames=args.max_frames)
    print(f"Loaded {len(hands)} frames from CSV.")

    hands = filter_hands(hands, chirality)
    if chirality:
        print(f"Kept {len(hands)} '{chirality}' frame(s)")

    if not hands:
        print("Error: No frames to show")
        return 1

    if args.frame is not None:
        if not 0 <= args.frame < len(hands):
            print(f"Error: Frame {args.frame} out of range (0-{len(hands) - 1})")
            return 1
        for line in format_frame_detail(args.frame, hands[args.frame],
                                        display['position_precision']):
            print(line)
    else:
        print_frames(hands, display['timestamp_precision'],
                     display['position_precision'], display['max_frames_listed'])

    output_dir = args.output or os.path.dirname(os.path.abspath(args.csv_file))
    recording_name = os.path.splitext(os.path.basename(args.csv_file))[0]

    if args.plot:
        visualization = config['visualization']
        plot_dir = os.path.join(output_dir, f"{recording_name}_plots")
        try:
            generate_all_hand_plots(hands, plot_dir,
                                    trajectory_joint=visualization['trajectory_joint'],
                                    skeleton_frame_step=visualization['skeleton_frame_step'])
        except (OSError, ValueError) as e:
            print(f"Warning: Could not generate plots: {e}")

    if args.export_csv or config['output']['export_csv']:
        export_path = os.path.join(output_dir, f"{recording_name}_filtered.csv")
        try:
            write_hands_to_csv(hands, export_path)
            print(f"Exported {len(hands)} frame(s) to: {export_path}")
        except IOError as e:
            print(f"Error: {e}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
