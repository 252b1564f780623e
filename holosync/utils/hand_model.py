#!/usr/bin/env python3
"""
hand_model.py

Value types for hand-tracking frames and the fixed joint layout of the
pivoted hand-data CSV.

Each CSV row describes one tracked hand at one instant:
    t_mono, t_wall, chirality, then 7 columns per joint
    (px, py, pz, qx, qy, qz, qw) for every joint in JOINT_NAMES order.

Quaternions are stored vector part first, scalar last: (x, y, z, w).

Usage:
    from holosync.utils.hand_model import Hand, JOINT_NAMES

    tip = hand.get_joint('indexFingerTip')
    if tip is not None:
        print(tip.position.as_array())
"""

from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple

import numpy as np


# =============================================================================
# JOINT LAYOUT
# =============================================================================

FINGER_PREFIXES = ['indexFinger', 'middleFinger', 'ringFinger', 'littleFinger']
FINGER_SEGMENTS = ['Metacarpal', 'Knuckle', 'IntermediateBase', 'IntermediateTip', 'Tip']

# Column order of the joints in the CSV, after the three leading columns
JOINT_NAMES = (
    ['forearmArm', 'forearmWrist',
     'thumbKnuckle', 'thumbIntermediateBase', 'thumbIntermediateTip', 'thumbTip'] +
    [prefix + segment for prefix in FINGER_PREFIXES for segment in FINGER_SEGMENTS]
)

WRIST_JOINT = 'forearmWrist'

FINGERTIP_JOINTS = {
    'Thumb': 'thumbTip',
    'Index': 'indexFingerTip',
    'Middle': 'middleFingerTip',
    'Ring': 'ringFingerTip',
    'Little': 'littleFingerTip',
}


def _build_hand_bones() -> List[Tuple[str, str]]:
    """Parent/child joint pairs of the hand skeleton."""
    bones = [('forearmArm', WRIST_JOINT)]

    thumb = ['thumbKnuckle', 'thumbIntermediateBase', 'thumbIntermediateTip', 'thumbTip']
    chains = [thumb] + [[prefix + segment for segment in FINGER_SEGMENTS]
                        for prefix in FINGER_PREFIXES]

    for chain in chains:
        bones.append((WRIST_JOINT, chain[0]))
        bones.extend(zip(chain[:-1], chain[1:]))

    return bones


HAND_BONES = _build_hand_bones()


# =============================================================================
# VALUE TYPES
# =============================================================================

class Vector3(NamedTuple):
    """A location in 3D space."""
    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


class Quaternion(NamedTuple):
    """An orientation in 3D space, (x, y, z, w) order."""
    x: float
    y: float
    z: float
    w: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z, self.w], dtype=float)


class Joint(NamedTuple):
    """A single joint sample: position and orientation."""
    position: Vector3
    orientation: Quaternion

    def as_array(self) -> np.ndarray:
        """Return [px, py, pz, qx, qy, qz, qw]."""
        return np.concatenate([self.position.as_array(), self.orientation.as_array()])


class Hand(NamedTuple):
    """
    One row of hand data from the CSV.

    Attributes:
        t_mono (float): Monotonic time of the sample (frame clock)
        t_wall (float): Wall-clock time of the sample
        chirality (str): Raw chirality column, 'left' or 'right' in practice
        joints (Mapping[str, Joint]): Joint samples keyed by joint name.
            The parser stores a read-only view.
    """
    t_mono: float
    t_wall: float
    chirality: str
    joints: Mapping[str, Joint]

    def __hash__(self):
        # Key order does not affect equality, so it must not affect the hash
        return hash((self.t_mono, self.t_wall, self.chirality,
                     frozenset(self.joints.items())))

    def get_joint(self, name: str) -> Optional[Joint]:
        return self.joints.get(name)

    def fingertip_positions(self) -> Dict[str, Vector3]:
        """
        Positions of the fingertips present in this frame.

        Returns:
            Dict[str, Vector3]: Finger label ('Thumb', 'Index', ...) to position,
                                in FINGERTIP_JOINTS order
        """
        tips = {}
        for label, joint_name in FINGERTIP_JOINTS.items():
            joint = self.joints.get(joint_name)
            if joint is not None:
                tips[label] = joint.position
        return tips

    @property
    def is_complete(self) -> bool:
        """True when every joint in JOINT_NAMES was populated."""
        return all(name in self.joints for name in JOINT_NAMES)
