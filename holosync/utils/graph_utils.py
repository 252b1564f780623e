#!/usr/bin/env python3
"""
Graph utilities for hand-tracking recordings

This module contains the plotting functions for loaded hand frames:
fingertip paths in 3D, single-frame hand skeletons and joint coordinates
over time.
"""

import os
from typing import Dict, List, Optional

import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401 needed for 3d projection
import numpy as np

from holosync.utils.hand_frames import joint_trajectory, timestamps
from holosync.utils.hand_model import FINGERTIP_JOINTS, HAND_BONES, Hand
from holosync.utils.math_utils import quat_to_rot_matrix


class HandPlotter:
    """Main class for handling all hand-frame plotting."""

    def __init__(self):
        """Initialize the plotter with color schemes and styling."""
        self.colors = {
            'axes': {'x': '#FF4444', 'y': '#44FF44', 'z': '#4444FF'},
            'fingers': plt.cm.tab10,
            'bone': '#555555',
            'joint': '#1F77B4',
        }

        self.markers = {
            'start': 'o',
            'end': 's',
            'joint': 'o',
        }

        plt.style.use('default')
        plt.rcParams['figure.facecolor'] = 'white'
        plt.rcParams['axes.facecolor'] = 'white'
        plt.rcParams['grid.alpha'] = 0.3

    def setup_3d_axes(self, ax, title: str = "") -> None:
        """Set up 3D axes with RGB colored labels."""
        ax.set_xlabel('X', color=self.colors['axes']['x'], fontweight='bold', fontsize=12)
        ax.set_ylabel('Y', color=self.colors['axes']['y'], fontweight='bold', fontsize=12)
        ax.set_zlabel('Z', color=self.colors['axes']['z'], fontweight='bold', fontsize=12)

        if title:
            ax.set_title(title, fontsize=14, fontweight='bold', pad=20)

        ax.tick_params(axis='x', colors=self.colors['axes']['x'])
        ax.tick_params(axis='y', colors=self.colors['axes']['y'])
        ax.tick_params(axis='z', colors=self.colors['axes']['z'])

    def draw_joint_frame(self, ax, position: np.ndarray, quaternion: np.ndarray,
                         scale: float = 0.01) -> None:
        """Draw the local RGB axes of a joint at its position."""
        R = quat_to_rot_matrix(quaternion)
        for column, axis_name in enumerate(['x', 'y', 'z']):
            direction = R[:, column] * scale
            ax.quiver(position[0], position[1], position[2],
                      direction[0], direction[1], direction[2],
                      color=self.colors['axes'][axis_name], linewidth=1.5,
                      arrow_length_ratio=0.3)

    @staticmethod
    def set_equal_limits(ax, points: np.ndarray) -> None:
        """Give the 3D axes the same span on X, Y and Z around the data."""
        points = points[~np.isnan(points).any(axis=1)]
        if len(points) == 0:
            return

        max_range = (points.max(axis=0) - points.min(axis=0)).max() / 2.0
        if max_range == 0:
            max_range = 0.05
        mid = (points.max(axis=0) + points.min(axis=0)) * 0.5

        ax.set_xlim(mid[0] - max_range, mid[0] + max_range)
        ax.set_ylim(mid[1] - max_range, mid[1] + max_range)
        ax.set_zlim(mid[2] - max_range, mid[2] + max_range)

    def plot_fingertip_trajectories(self, hands: List[Hand], output_path: str,
                                    title: str = "Fingertip Trajectories") -> None:
        """
        Plot the 3D path of every fingertip across all frames.

        Args:
            hands: Frames to plot, in time order
            output_path: Path to save the plot
            title: Plot title
        """
        print("Generating fingertip trajectory plot...")

        fig = plt.figure(figsize=(12, 10))
        ax = fig.add_subplot(111, projection='3d')
        self.setup_3d_axes(ax, title)

        all_points = []
        for i, (label, joint_name) in enumerate(FINGERTIP_JOINTS.items()):
            color = self.colors['fingers'](i)
            path = joint_trajectory(hands, joint_name)
            path = path[~np.isnan(path).any(axis=1)]
            if len(path) == 0:
                continue
            all_points.append(path)

            ax.plot(path[:, 0], path[:, 1], path[:, 2], color=color,
                    linewidth=1.5, alpha=0.8, label=label)
            ax.scatter(*path[0], color=color, marker=self.markers['start'], s=60,
                       edgecolors='black')
            ax.scatter(*path[-1], color=color, marker=self.markers['end'], s=60,
                       edgecolors='black')

        if all_points:
            self.set_equal_limits(ax, np.vstack(all_points))
            ax.legend(loc='upper left', fontsize=10)

        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        print(f"  - Saved: {output_path}")
        plt.close(fig)

    def plot_hand_skeleton(self, hand: Hand, output_path: str, title: str = "",
                           show_frames: bool = True) -> None:
        """
        Plot the joints and bones of a single frame.

        Args:
            hand: Frame to draw
            output_path: Path to save the plot
            title: Plot title, defaults to chirality and timestamp
            show_frames: Draw each joint's orientation axes
        """
        if not title:
            title = f"{hand.chirality or 'unknown'} hand @ t_mono={hand.t_mono:.2f}"

        fig = plt.figure(figsize=(10, 10))
        ax = fig.add_subplot(111, projection='3d')
        self.setup_3d_axes(ax, title)

        for parent, child in HAND_BONES:
            if parent in hand.joints and child in hand.joints:
                a = hand.joints[parent].position
                b = hand.joints[child].position
                ax.plot([a.x, b.x], [a.y, b.y], [a.z, b.z],
                        color=self.colors['bone'], linewidth=2)

        if hand.joints:
            positions = np.array([joint.position.as_array() for joint in hand.joints.values()])
            ax.scatter(positions[:, 0], positions[:, 1], positions[:, 2],
                       color=self.colors['joint'], marker=self.markers['joint'], s=25)
            self.set_equal_limits(ax, positions)

            if show_frames:
                span = (positions.max(axis=0) - positions.min(axis=0)).max()
                scale = span * 0.08 if span > 0 else 0.01
                for joint in hand.joints.values():
                    self.draw_joint_frame(ax, joint.position.as_array(),
                                          joint.orientation.as_array(), scale)

        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        print(f"  - Saved: {output_path}")
        plt.close(fig)

    def plot_joint_positions_over_time(self, hands: List[Hand], joint_name: str,
                                       output_path: str) -> None:
        """Plot X, Y and Z of one joint against t_mono."""
        times = timestamps(hands)
        path = joint_trajectory(hands, joint_name)

        fig, axes = plt.subplots(3, 1, figsize=(12, 9), sharex=True)
        for column, axis_name in enumerate(['x', 'y', 'z']):
            ax = axes[column]
            ax.plot(times, path[:, column], color=self.colors['axes'][axis_name],
                    linewidth=1.5)
            ax.set_ylabel(axis_name.upper(), fontweight='bold')
            ax.grid(True)
        axes[-1].set_xlabel('t_mono')

        plt.suptitle(f"{joint_name} position over time", fontsize=14, fontweight='bold')
        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        print(f"  - Saved: {output_path}")
        plt.close(fig)


def generate_all_hand_plots(hands: List[Hand], output_dir: str,
                            trajectory_joint: str = 'indexFingerTip',
                            skeleton_frame_step: Optional[int] = None) -> List[str]:
    """
    Generate all plots for a recording.

    Args:
        hands: Frames to plot
        output_dir: Output directory for saving plots
        trajectory_joint: Joint used for the position-over-time plot
        skeleton_frame_step: Draw a skeleton every N frames. If None, only
                             the first frame is drawn.

    Returns:
        List[str]: Paths of the saved images; empty when there are no frames
    """
    if not hands:
        print("Warning: No frames to plot")
        return []

    plotter = HandPlotter()
    os.makedirs(output_dir, exist_ok=True)
    saved = []

    path = os.path.join(output_dir, 'fingertip_trajectories.png')
    plotter.plot_fingertip_trajectories(hands, path)
    saved.append(path)

    path = os.path.join(output_dir, f'{trajectory_joint}_over_time.png')
    plotter.plot_joint_positions_over_time(hands, trajectory_joint, path)
    saved.append(path)

    frame_indices = [0] if not skeleton_frame_step else range(0, len(hands), skeleton_frame_step)
    for index in frame_indices:
        path = os.path.join(output_dir, f'skeleton_frame_{index:05d}.png')
        plotter.plot_hand_skeleton(hands[index], path)
        saved.append(path)

    return saved


def describe_plots(saved_paths: List[str]) -> Dict[str, int]:
    """Count saved plots by kind, for summaries."""
    counts = {'fingertip_trajectories': 0, 'over_time': 0, 'skeleton': 0}
    for path in saved_paths:
        name = os.path.basename(path)
        if name.startswith('fingertip_trajectories'):
            counts['fingertip_trajectories'] += 1
        elif name.startswith('skeleton_frame_'):
            counts['skeleton'] += 1
        elif name.endswith('_over_time.png'):
            counts['over_time'] += 1
    return counts
