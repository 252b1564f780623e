#!/usr/bin/env python3
"""
hand_frames.py

Module for turning parsed hand frames into numeric views and for
per-frame geometric analysis.

Key Features:
    - Chirality filtering of frame lists
    - Dense numpy arrays and pandas DataFrames of joint samples
    - Per-joint position trajectories over time
    - Joint poses expressed in the wrist frame
    - Thumb/index pinch distance

Coordinate Frame Conventions:
    - Raw CSV joints are in the tracking (world) frame
    - transform_to_wrist_frame re-expresses them relative to forearmWrist

Usage:
    from holosync.utils.csv_handling import read_hands_from_csv
    from holosync.utils.hand_frames import filter_hands, joint_trajectory

    hands = filter_hands(read_hands_from_csv('hand_data.csv'), chirality='right')
    tip_path = joint_trajectory(hands, 'indexFingerTip')
"""

import sys
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from holosync.utils.csv_handling import VALUES_PER_JOINT, build_csv_header
from holosync.utils.hand_model import Hand, JOINT_NAMES, WRIST_JOINT
from holosync.utils.math_utils import (invert_transform, matrix_to_pose,
                                       point_distance, pose_to_matrix)


# ---------------------------
# Frame filtering utilities
# ---------------------------
def filter_hands(hands: List[Hand], chirality: Optional[str] = None) -> List[Hand]:
    """
    Filter frames by chirality.

    Args:
        hands (list): Frames to filter
        chirality (str, optional): 'left', 'right', or any other label.
                                   Compared case-insensitively with
                                   surrounding whitespace ignored.
                                   If None, all frames are returned.

    Returns:
        list: Frames whose chirality matches
    """
    if chirality is None:
        return list(hands)

    wanted = chirality.strip().lower()
    return [hand for hand in hands if hand.chirality.strip().lower() == wanted]


def count_by_chirality(hands: List[Hand]) -> Dict[str, int]:
    """Number of frames per normalized chirality label."""
    counts = {}
    for hand in hands:
        label = hand.chirality.strip().lower() or 'unknown'
        counts[label] = counts.get(label, 0) + 1
    return counts


# ---------------------------
# Numeric views
# ---------------------------
def hands_to_array(hands: List[Hand], joint_names=JOINT_NAMES) -> np.ndarray:
    """
    Stack joint samples into a dense array.

    Args:
        hands (list): Frames
        joint_names (list): Joints to include, in output order

    Returns:
        np.ndarray: Shape (N, J, 7) with [px, py, pz, qx, qy, qz, qw] per
                    joint; missing joints are NaN
    """
    data = np.full((len(hands), len(joint_names), VALUES_PER_JOINT), np.nan)
    for i, hand in enumerate(hands):
        for j, name in enumerate(joint_names):
            joint = hand.joints.get(name)
            if joint is not None:
                data[i, j] = joint.as_array()
    return data


def joint_trajectory(hands: List[Hand], joint_name: str) -> np.ndarray:
    """
    Position of one joint across frames.

    Returns:
        np.ndarray: Shape (N, 3); rows are NaN where the joint is missing
    """
    if joint_name not in JOINT_NAMES:
        raise ValueError(f"Unknown joint name: {joint_name}")

    positions = np.full((len(hands), 3), np.nan)
    for i, hand in enumerate(hands):
        joint = hand.joints.get(joint_name)
        if joint is not None:
            positions[i] = joint.position.as_array()
    return positions


def timestamps(hands: List[Hand], field: str = 't_mono') -> np.ndarray:
    """Array of 't_mono' or 't_wall' values."""
    if field not in ('t_mono', 't_wall'):
        raise ValueError(f"Unknown timestamp field: {field}")
    return np.array([getattr(hand, field) for hand in hands], dtype=float)


def hands_to_dataframe(hands: List[Hand]) -> pd.DataFrame:
    """
    Build a DataFrame with the pivoted CSV column layout.

    Missing joints appear as NaN so they can be told apart from samples that
    really are zero.
    """
    columns = build_csv_header()
    joint_values = hands_to_array(hands).reshape(len(hands), len(JOINT_NAMES) * VALUES_PER_JOINT)

    df = pd.DataFrame(joint_values, columns=columns[3:])
    df.insert(0, 't_mono', [hand.t_mono for hand in hands])
    df.insert(1, 't_wall', [hand.t_wall for hand in hands])
    df.insert(2, 'chirality', [hand.chirality for hand in hands])
    return df


# ---------------------------
# Per-frame geometry
# ---------------------------
def transform_to_wrist_frame(hand: Hand,
                             wrist_joint: str = WRIST_JOINT) -> Dict[str, Tuple[np.ndarray, np.ndarray]]:
    """
    Express every joint pose relative to the wrist.

    Computes T_W_J = inv(T_O_W) @ T_O_J for each joint J, where O is the
    tracking origin and W the wrist joint.

    Args:
        hand (Hand): Frame to transform
        wrist_joint (str): Joint used as the reference frame

    Returns:
        dict: joint name -> (position (3,), quaternion (4,) x,y,z,w)

    Raises:
        ValueError: If the wrist joint is not present in the frame
    """
    wrist = hand.joints.get(wrist_joint)
    if wrist is None:
        raise ValueError(f"Frame has no '{wrist_joint}' joint to use as reference")

    T_O_W = pose_to_matrix(wrist.position.as_array(), wrist.orientation.as_array())
    T_W_O = invert_transform(T_O_W)

    local_poses = {}
    for name, joint in hand.joints.items():
        T_O_J = pose_to_matrix(joint.position.as_array(), joint.orientation.as_array())
        local_poses[name] = matrix_to_pose(T_W_O @ T_O_J)

    return local_poses


def pinch_distance(hand: Hand) -> Optional[float]:
    """Distance between thumbTip and indexFingerTip, None if either is missing."""
    thumb = hand.joints.get('thumbTip')
    index = hand.joints.get('indexFingerTip')
    if thumb is None or index is None:
        return None
    return point_distance(thumb.position.as_array(), index.position.as_array())


# Prevent direct execution of this module
if __name__ == "__main__":
    print("This module is a library and should not be run directly.")
    print("Import it in other scripts to use its functionality.")
    sys.exit(1)
