"""
Math utility functions for hand-joint poses.

This module provides common mathematical operations for:
- Quaternion operations (multiplication, conjugate, normalization,
  rotation matrix conversion)
- Transformation matrix operations (pose to matrix, matrix to pose,
  inversion)
- Point distances

Quaternions are in (x, y, z, w) order throughout, matching the hand-data CSV.
"""

import numpy as np


IDENTITY_QUAT = np.array([0.0, 0.0, 0.0, 1.0])


# ---------------------------
# Quaternion utilities (x,y,z,w order)
# ---------------------------
def quat_mul(q1, q2):
    """
    Multiply quaternions q = q1 * q2.

    Args:
        q1: First quaternion (x, y, z, w)
        q2: Second quaternion (x, y, z, w)

    Returns:
        Product quaternion (x, y, z, w)
    """
    x1, y1, z1, w1 = q1
    x2, y2, z2, w2 = q2
    w = w1*w2 - x1*x2 - y1*y2 - z1*z2
    x = w1*x2 + x1*w2 + y1*z2 - z1*y2
    y = w1*y2 - x1*z2 + y1*w2 + z1*x2
    z = w1*z2 + x1*y2 - y1*x2 + z1*w2
    return np.array([x, y, z, w])


def quat_conjugate(q):
    """
    Return the conjugate of a quaternion q = [x,y,z,w].

    For unit quaternions this is also the inverse.
    """
    x, y, z, w = q
    return np.array([-x, -y, -z, w])


def normalize_quat(q):
    """
    Normalize a quaternion to unit length.

    A zero-length quaternion (e.g. a joint whose orientation columns all
    defaulted to 0.0) becomes the identity rotation.

    Args:
        q: Quaternion (x, y, z, w)

    Returns:
        Normalized quaternion
    """
    q = np.asarray(q, dtype=float)
    norm = np.linalg.norm(q)
    if norm <= 0:
        print("Warning: Zero-length quaternion encountered, using identity")
        return IDENTITY_QUAT.copy()
    return q / norm


def quat_to_rot_matrix(q):
    """
    Convert quaternion (x,y,z,w) to 3x3 rotation matrix.

    Normalizes input quaternion first; zero-length input gives identity.
    """
    x, y, z, w = q
    n = np.sqrt(w*w + x*x + y*y + z*z)
    if n == 0:
        return np.eye(3)
    x, y, z, w = x/n, y/n, z/n, w/n
    R = np.array([
        [1 - 2*(y*y + z*z), 2*(x*y - z*w), 2*(x*z + y*w)],
        [2*(x*y + z*w), 1 - 2*(x*x + z*z), 2*(y*z - x*w)],
        [2*(x*z - y*w), 2*(y*z + x*w), 1 - 2*(x*x + y*y)]
    ])
    return R


def rot_matrix_to_quat(R):
    """
    Convert a 3x3 rotation matrix to a unit quaternion (x,y,z,w) with w >= 0.
    """
    R = np.asarray(R, dtype=float)
    trace = np.trace(R)

    if trace > 0:
        s = np.sqrt(trace + 1.0) * 2
        w = 0.25 * s
        x = (R[2, 1] - R[1, 2]) / s
        y = (R[0, 2] - R[2, 0]) / s
        z = (R[1, 0] - R[0, 1]) / s
    elif R[0, 0] > R[1, 1] and R[0, 0] > R[2, 2]:
        s = np.sqrt(1.0 + R[0, 0] - R[1, 1] - R[2, 2]) * 2
        w = (R[2, 1] - R[1, 2]) / s
        x = 0.25 * s
        y = (R[0, 1] + R[1, 0]) / s
        z = (R[0, 2] + R[2, 0]) / s
    elif R[1, 1] > R[2, 2]:
        s = np.sqrt(1.0 + R[1, 1] - R[0, 0] - R[2, 2]) * 2
        w = (R[0, 2] - R[2, 0]) / s
        x = (R[0, 1] + R[1, 0]) / s
        y = 0.25 * s
        z = (R[1, 2] + R[2, 1]) / s
    else:
        s = np.sqrt(1.0 + R[2, 2] - R[0, 0] - R[1, 1]) * 2
        w = (R[1, 0] - R[0, 1]) / s
        x = (R[0, 2] + R[2, 0]) / s
        y = (R[1, 2] + R[2, 1]) / s
        z = 0.25 * s

    q = np.array([x, y, z, w])
    q = q / np.linalg.norm(q)
    if q[3] < 0:
        q = -q
    return q


# ---------------------------
# Transformation matrix utilities
# ---------------------------
def pose_to_matrix(translation, quaternion):
    """
    Convert translation vector and quaternion to 4x4 transformation matrix.

    Args:
        translation: (3,) array [x, y, z]
        quaternion: (4,) array [x, y, z, w]

    Returns:
        (4, 4) transformation matrix
    """
    T = np.eye(4)
    T[:3, :3] = quat_to_rot_matrix(quaternion)
    T[:3, 3] = np.asarray(translation, dtype=float)
    return T


def matrix_to_pose(T):
    """
    Extract translation vector and quaternion from 4x4 transformation matrix.

    Args:
        T: (4, 4) transformation matrix

    Returns:
        translation: (3,) array [x, y, z]
        quaternion: (4,) array [x, y, z, w]
    """
    T = np.asarray(T, dtype=float)
    return T[:3, 3].copy(), rot_matrix_to_quat(T[:3, :3])


def invert_transform(T):
    """
    Invert a rigid 4x4 transform using R^T rather than a general inverse.
    """
    T = np.asarray(T, dtype=float)
    R = T[:3, :3]
    t = T[:3, 3]
    T_inv = np.eye(4)
    T_inv[:3, :3] = R.T
    T_inv[:3, 3] = -R.T @ t
    return T_inv


def point_distance(a, b):
    """Euclidean distance between two 3D points."""
    return float(np.linalg.norm(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)))
