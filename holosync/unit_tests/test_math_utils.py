#!/usr/bin/env python3
"""
Unit tests for math_utils.py functions.

Tests the quaternion and transform helpers used for joint poses. All
quaternions here are (x, y, z, w).
"""

import sys

import numpy as np

from holosync.utils.math_utils import (invert_transform, matrix_to_pose, normalize_quat,
                                       point_distance, pose_to_matrix, quat_conjugate,
                                       quat_mul, quat_to_rot_matrix, rot_matrix_to_quat)

S = np.sqrt(0.5)


def test_quaternion_multiplication():
    """Test quaternion multiplication."""
    print("Testing quaternion multiplication...")

    identity = np.array([0.0, 0.0, 0.0, 1.0])
    q = np.array([0.0, S, 0.0, S])
    assert np.allclose(quat_mul(identity, q), q, atol=1e-10), "Identity multiplication failed"
    assert np.allclose(quat_mul(q, identity), q, atol=1e-10), "Identity should commute"
    print("  Identity multiplication: +")

    # Two 90 degree turns about Z make 180 degrees about Z
    q_90z = np.array([0.0, 0.0, S, S])
    q_180z = quat_mul(q_90z, q_90z)
    assert np.allclose(q_180z, [0.0, 0.0, 1.0, 0.0], atol=1e-10), "90+90 about Z failed"
    print("  Composition: +")

    print("+ Quaternion multiplication tests passed!")


def test_rotation_matrix_conversions():
    """Test quaternion to rotation matrix conversions."""
    print("\nTesting rotation matrix conversions...")

    assert np.allclose(quat_to_rot_matrix([0.0, 0.0, 0.0, 1.0]), np.eye(3), atol=1e-10)
    print("  Identity quaternion: +")

    R_90z = quat_to_rot_matrix([0.0, 0.0, S, S])
    expected_90z = np.array([[0, -1, 0], [1, 0, 0], [0, 0, 1]])
    assert np.allclose(R_90z, expected_90z, atol=1e-10), "90-degree Z rotation failed"
    print("  90-degree Z rotation: +")

    assert np.allclose(quat_to_rot_matrix([0.0, 0.0, 0.0, 2.0]), np.eye(3), atol=1e-10)
    assert np.allclose(quat_to_rot_matrix([0.0, 0.0, 0.0, 0.0]), np.eye(3))
    print("  Normalization and zero quaternion: +")

    q = normalize_quat([0.1, -0.4, 0.3, 0.8])
    q_back = rot_matrix_to_quat(quat_to_rot_matrix(q))
    assert np.allclose(q_back, q, atol=1e-10), "Matrix to quaternion conversion failed"

    # 180 degrees about X exercises the non-positive trace branch
    q_180x = rot_matrix_to_quat(np.diag([1.0, -1.0, -1.0]))
    assert np.allclose(np.abs(q_180x), [1.0, 0.0, 0.0, 0.0], atol=1e-10)
    print("  Matrix to quaternion: +")

    print("+ Rotation matrix conversion tests passed!")


def test_transformation_matrices():
    """Test 4x4 transformation matrix operations."""
    print("\nTesting transformation matrices...")

    translation = np.array([0.1, 0.2, 0.3])
    quaternion = np.array([0.0, S, 0.0, S])

    T = pose_to_matrix(translation, quaternion)
    t_back, q_back = matrix_to_pose(T)
    assert np.allclose(t_back, translation, atol=1e-10), "Translation extraction failed"
    assert np.allclose(quat_to_rot_matrix(q_back), quat_to_rot_matrix(quaternion), atol=1e-10)
    print("  Pose extraction: +")

    T_inv = invert_transform(T)
    assert np.allclose(T @ T_inv, np.eye(4), atol=1e-10), "Rigid inverse failed"
    assert np.allclose(T_inv, np.linalg.inv(T), atol=1e-10)
    print("  Rigid inverse: +")

    print("+ Transformation matrix tests passed!")


def test_quaternion_utilities():
    """Test quaternion utility functions."""
    print("\nTesting quaternion utilities...")

    q = np.array([0.5, 0.5, 0.5, 0.5])
    assert np.allclose(quat_conjugate(q), [-0.5, -0.5, -0.5, 0.5], atol=1e-10)
    assert np.allclose(quat_mul(q, quat_conjugate(q)), [0.0, 0.0, 0.0, 1.0], atol=1e-10)
    print("  Quaternion conjugate: +")

    q_norm = normalize_quat([1.0, 2.0, 3.0, 4.0])
    assert abs(np.linalg.norm(q_norm) - 1.0) < 1e-10, "Quaternion normalization failed"

    # Orientation columns that all defaulted to 0.0
    assert np.allclose(normalize_quat([0.0, 0.0, 0.0, 0.0]), [0.0, 0.0, 0.0, 1.0])
    print("  Quaternion normalization: +")

    assert np.isclose(point_distance([0, 0, 0], [3, 4, 0]), 5.0)
    print("  Point distance: +")

    print("+ Quaternion utility tests passed!")


def main():
    """Run all math utility tests."""
    print("Running math utility unit tests...")
    print("=" * 50)

    try:
        test_quaternion_multiplication()
        test_rotation_matrix_conversions()
        test_transformation_matrices()
        test_quaternion_utilities()

        print("\n" + "=" * 50)
        print("*** ALL MATH UTILITY TESTS PASSED! ***")

    except Exception as e:
        print(f"\n*** MATH UTILITY TEST FAILED: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
