#!/usr/bin/env python3
"""
csv_handling.py

Module for reading and writing pivoted hand-tracking CSV files.

Each data row holds one hand frame:
    t_mono, t_wall, chirality, <joint>_px, <joint>_py, <joint>_pz,
    <joint>_qx, <joint>_qy, <joint>_qz, <joint>_qw, ...
with the joints in JOINT_NAMES order. The first row is a header and is
always skipped.

Functions:
    read_hands_from_csv: Load every hand frame of a CSV file.
    parse_hand_row: Parse a single data row into a Hand.
    write_hands_to_csv: Write frames back out in the same layout.

Usage:
    This module is designed to be imported and used by other scripts.
    It should not be run directly.

    Example:
        from holosync.utils.csv_handling import read_hands_from_csv

        hands = read_hands_from_csv('recordings/hand_data_pivoted 3.csv')
"""

import os
import re
import sys
from types import MappingProxyType
from typing import List, Optional

from holosync.utils.hand_model import Hand, Joint, Quaternion, Vector3, JOINT_NAMES

# Columns before the first joint: t_mono, t_wall, chirality
LEADING_COLUMNS = 3
# px, py, pz, qx, qy, qz, qw
VALUES_PER_JOINT = 7
JOINT_VALUE_SUFFIXES = ['px', 'py', 'pz', 'qx', 'qy', 'qz', 'qw']

_HEX_FLOAT_PREFIX = re.compile(r'[+-]?0[xX]')


def read_hands_from_csv(csv_path, max_frames=None):
    """
    Read hand frames from a pivoted hand-data CSV file.

    Args:
        csv_path (str): Path to the CSV file. A path without a '.csv'
                        suffix that does not exist is retried with the
                        suffix appended.
        max_frames (int, optional): Maximum number of frames to read.
                                    If None, reads all frames.

    Returns:
        list: List of Hand objects in file order. Empty if the file is
              missing or cannot be read.

    Notes:
        - The first row is treated as a header and skipped
        - Rows are split on newlines and commas; there is no quoting
        - Rows with fewer than two columns are ignored
        - Numeric fields that do not parse default to 0.0
        - A joint is only filled in when all 7 of its columns are present
    """
    hands = []

    resolved_path = resolve_csv_path(csv_path)
    if resolved_path is None:
        print("CSV file not found.")
        return hands

    try:
        with open(resolved_path, 'r', encoding='utf-8') as csv_file:
            data = csv_file.read()
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading CSV file: {e}")
        return hands

    rows = data.split('\n')

    # Skip the header row
    for row in rows[1:]:
        if max_frames is not None and len(hands) >= max_frames:
            break

        hand = parse_hand_row(row)
        if hand is not None:
            hands.append(hand)

    return hands


def resolve_csv_path(csv_path) -> Optional[str]:
    """
    Locate the CSV file on disk.

    Args:
        csv_path (str): File path, with or without the '.csv' extension

    Returns:
        str: Existing file path, or None if nothing matches
    """
    csv_path = os.fspath(csv_path)
    if os.path.isfile(csv_path):
        return csv_path

    if not csv_path.lower().endswith('.csv'):
        with_extension = csv_path + '.csv'
        if os.path.isfile(with_extension):
            return with_extension

    return None


def parse_hand_row(row: str) -> Optional[Hand]:
    """
    Parse a single CSV data row into a Hand.

    Args:
        row (str): One line of the CSV file, without the newline

    Returns:
        Hand: Parsed frame, or None if the row has fewer than two columns
    """
    columns = row.split(',')
    if len(columns) < 2:
        return None

    t_mono = parse_float(columns[0])
    t_wall = parse_float(columns[1])
    chirality = columns[2] if len(columns) > 2 else ''

    joints = {}
    index = LEADING_COLUMNS
    for joint_name in JOINT_NAMES:
        # Every later joint starts further right, so stop at the first misfit
        if index + VALUES_PER_JOINT > len(columns):
            break

        values = [parse_float(token) for token in columns[index:index + VALUES_PER_JOINT]]
        joints[joint_name] = Joint(
            position=Vector3(*values[:3]),
            orientation=Quaternion(*values[3:]),
        )
        index += VALUES_PER_JOINT

    return Hand(t_mono=t_mono, t_wall=t_wall, chirality=chirality,
                joints=MappingProxyType(joints))


def parse_float(text: str, default: float = 0.0) -> float:
    """
    Parse a numeric CSV field, falling back to `default`.

    Only a bare ASCII number is accepted. Surrounding whitespace, '_' digit
    separators and non-ASCII digits all give `default`. Hexadecimal floats
    such as '0x1p-2' are accepted.
    """
    if not text.isascii() or text != text.strip() or '_' in text:
        return default
    try:
        if _HEX_FLOAT_PREFIX.match(text):
            return float.fromhex(text)
        return float(text)
    except ValueError:
        return default


def build_csv_header() -> List[str]:
    """Column names of the pivoted hand-data layout."""
    header = ['t_mono', 't_wall', 'chirality']
    for joint_name in JOINT_NAMES:
        header.extend(f"{joint_name}_{suffix}" for suffix in JOINT_VALUE_SUFFIXES)
    return header


def write_hands_to_csv(hands: List[Hand], csv_path: str) -> str:
    """
    Write hand frames to a CSV file that read_hands_from_csv can load back.

    Fields are joined with bare commas, the exact inverse of the reader's
    split, so a chirality such as '"left"' comes back unchanged. Joints after
    the last populated one are left off the row. A missing joint followed by
    populated ones is written as seven zeros, since the layout is positional.

    Args:
        hands (List[Hand]): Frames to write
        csv_path (str): Destination file

    Returns:
        str: Path of the written file

    Raises:
        ValueError: If a chirality holds a comma or a line break
        IOError: If the file cannot be written
    """
    rows = [','.join(build_csv_header())]
    rows.extend(','.join(_hand_to_row(hand)) for hand in hands)

    output_dir = os.path.dirname(os.fspath(csv_path))
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    try:
        with open(csv_path, 'w', newline='', encoding='utf-8') as csv_file:
            for row in rows:
                csv_file.write(row + '\n')
    except OSError as e:
        raise IOError(f"Error writing CSV file {csv_path}: {e}")

    return os.fspath(csv_path)


def _hand_to_row(hand: Hand) -> List[str]:
    if any(char in hand.chirality for char in ',\r\n'):
        raise ValueError(f"Chirality {hand.chirality!r} cannot be stored in a CSV column")

    row = [repr(float(hand.t_mono)), repr(float(hand.t_wall)), hand.chirality]

    present = [name for name in JOINT_NAMES if name in hand.joints]
    if not present:
        return row

    last_index = JOINT_NAMES.index(present[-1])
    for joint_name in JOINT_NAMES[:last_index + 1]:
        joint = hand.joints.get(joint_name)
        if joint is None:
            row.extend(['0.0'] * VALUES_PER_JOINT)
        else:
            row.extend(repr(float(value)) for value in (*joint.position, *joint.orientation))

    return row


# Prevent direct execution of this module
if __name__ == "__main__":
    print("This module is a library and should not be run directly.")
    print("Import it in other scripts to use its functionality.")
    sys.exit(1)
