#!/usr/bin/env python3
"""
results_handler.py

Module for summarizing loaded hand recordings and storing the summaries in
YAML format.

This module provides functionality to:
- Create structured result containers for each recording
- Save results to YAML files with metadata
- Append results to a running YAML list
- Load previously saved results
- Write the summary of a batch run

Result Structure:
    - recording_metadata: Source name and when the summary was produced
    - summary: Overall statistics (frame counts, time span, pinch distance)
    - frame_results: Per-frame rows
    - additional_metadata: Free-form key/value pairs

Usage:
    from holosync.utils.results_handler import ResultsManager, create_result_from_hands

    result = create_result_from_hands('hand_data_pivoted 3', hands)
    manager = ResultsManager()
    manager.save_results(result, 'results/hand_data_pivoted 3')
"""

import os
import sys
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import numpy as np
import yaml

from holosync.utils.hand_frames import count_by_chirality, pinch_distance
from holosync.utils.hand_model import Hand, JOINT_NAMES


# =============================================================================
# RESULT DATA STRUCTURES
# =============================================================================

class HandDataResult:
    """
    Container for the summary of one hand-data recording.

    Attributes:
        source_name (str): Name of the CSV the frames came from
        timestamp (datetime): When the summary was created
        summary (dict): Overall statistics
        frame_results (list): Per-frame rows
        metadata (dict): Additional metadata
    """

    def __init__(self, source_name: str):
        self.source_name = source_name
        self.timestamp = datetime.now()
        self.summary = {}
        self.frame_results = []
        self.metadata = {}

    def add_summary(self, summary_dict: Dict[str, Any]) -> None:
        """
        Add summary statistics to the result.

        Args:
            summary_dict (Dict[str, Any]): Expected keys include
                total_frames, frames_by_chirality, complete_frames,
                t_mono_start, t_mono_end, duration, avg_pinch_distance
        """
        self.summary = summary_dict.copy()

    def add_frame_results(self, frames: List[Dict[str, Any]]) -> None:
        self.frame_results = frames.copy()

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert result to a dictionary suitable for YAML serialization.
        """
        return {
            'recording_metadata': {
                'source_name': self.source_name,
                'timestamp': self.timestamp.isoformat(),
            },
            'summary': self.summary,
            'frame_results': self.frame_results,
            'additional_metadata': self.metadata
        }


# =============================================================================
# RESULTS MANAGER
# =============================================================================

class ResultsManager:
    """
    Reads and writes recording summaries as YAML under one results directory.

    Every write goes through _write_yaml, which converts numpy values to
    plain YAML types first. Three files are produced:
        <recording dir>/hand_data_results.yaml   one HandDataResult
        <any path>.yaml                          a list built by append_results
        <results_dir>/batch_summary.yaml         output of summarize_batch()
    """

    BATCH_SUMMARY_FILENAME = 'batch_summary.yaml'

    def __init__(self, results_dir: Optional[str] = None):
        """
        Args:
            results_dir (str, optional): Default directory for saving results.
                                        If None, uses 'results/' in current directory.
        """
        self.results_dir = results_dir or os.path.join(os.getcwd(), 'results')

    def save_results(self, result: HandDataResult, output_dir: Optional[str] = None,
                     filename: str = 'hand_data_results.yaml') -> str:
        """
        Write one recording summary, creating the directory if needed.

        Args:
            result (HandDataResult): The result to save
            output_dir (str, optional): Target directory, defaults to results_dir
            filename (str): Name of the YAML file

        Returns:
            str: Full path to the saved file

        Raises:
            IOError: If the file cannot be written
        """
        output_path = os.path.join(output_dir or self.results_dir, filename)
        self._write_yaml(result.to_dict(), output_path)
        print(f"Results saved to: {output_path}")
        return output_path

    def save_batch_summary(self, batch_summary: Dict[str, Any]) -> str:
        """Write a batch summary to <results_dir>/batch_summary.yaml and return the path."""
        output_path = os.path.join(self.results_dir, self.BATCH_SUMMARY_FILENAME)
        self._write_yaml(batch_summary, output_path)
        return output_path

    def load_results(self, yaml_path: str) -> Any:
        """
        Load any file written by this class.

        Raises:
            FileNotFoundError: If the YAML file doesn't exist
            ValueError: If YAML parsing fails
        """
        if not os.path.isfile(yaml_path):
            raise FileNotFoundError(f"Results file not found: {yaml_path}")

        try:
            with open(yaml_path, 'r') as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing YAML file {yaml_path}: {e}")

    def append_results(self, result: HandDataResult, yaml_path: str) -> str:
        """
        Add a recording summary to a YAML list, one entry per recording.

        A missing or empty file starts a new list; a file holding a single
        saved result becomes the first entry.

        Raises:
            IOError: If the file cannot be written
            ValueError: If the existing file is not valid YAML
        """
        existing = self.load_results(yaml_path) if os.path.isfile(yaml_path) else None
        if existing is None:
            results_list = []
        elif isinstance(existing, list):
            results_list = existing
        else:
            results_list = [existing]

        results_list.append(result.to_dict())
        self._write_yaml(results_list, yaml_path)
        print(f"Results appended to: {yaml_path}")
        return yaml_path

    @classmethod
    def _write_yaml(cls, data: Any, output_path: str) -> None:
        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)

        try:
            with open(output_path, 'w') as f:
                yaml.dump(cls._make_yaml_serializable(data), f, default_flow_style=False,
                          allow_unicode=True, sort_keys=False)
        except (OSError, yaml.YAMLError) as e:
            raise IOError(f"Error writing results to {output_path}: {e}")

    @staticmethod
    def _make_yaml_serializable(obj: Any) -> Any:
        """
        Convert numpy values, tuples and read-only mappings to plain YAML types.
        """
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, np.bool_):
            return bool(obj)
        elif isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, Mapping):
            return {k: ResultsManager._make_yaml_serializable(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [ResultsManager._make_yaml_serializable(item) for item in obj]
        elif obj is None or isinstance(obj, (str, int, float, bool)):
            return obj
        else:
            return str(obj)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def create_result_from_hands(source_name: str, hands: List[Hand],
                             include_frames: bool = True) -> HandDataResult:
    """
    Create a HandDataResult from a list of parsed frames.

    Args:
        source_name (str): Name of the recording
        hands (List[Hand]): Parsed frames
        include_frames (bool): Also store one row per frame

    Returns:
        HandDataResult: Structured result object
    """
    result = HandDataResult(source_name)

    total_frames = len(hands)
    complete_frames = sum(1 for hand in hands if hand.is_complete)

    summary = {
        'total_frames': total_frames,
        'frames_by_chirality': count_by_chirality(hands),
        'complete_frames': complete_frames,
        'incomplete_frames': total_frames - complete_frames,
        'joints_per_frame': len(JOINT_NAMES),
    }

    if hands:
        t_mono = np.array([hand.t_mono for hand in hands], dtype=float)
        summary['t_mono_start'] = float(t_mono[0])
        summary['t_mono_end'] = float(t_mono[-1])
        summary['duration'] = float(t_mono[-1] - t_mono[0])

    pinches = [pinch_distance(hand) for hand in hands]
    pinch_values = [p for p in pinches if p is not None]
    if pinch_values:
        summary['avg_pinch_distance'] = float(np.mean(pinch_values))
        summary['min_pinch_distance'] = float(np.min(pinch_values))
        summary['max_pinch_distance'] = float(np.max(pinch_values))

    result.add_summary(summary)

    if include_frames:
        frames = []
        for index, (hand, pinch) in enumerate(zip(hands, pinches)):
            frames.append({
                'frame_index': index,
                't_mono': hand.t_mono,
                't_wall': hand.t_wall,
                'chirality': hand.chirality,
                'joint_count': len(hand.joints),
                'pinch_distance': pinch,
            })
        result.add_frame_results(frames)

    return result


# Prevent direct execution of this module
if __name__ == "__main__":
    print("This module is a library and should not be run directly.")
    print("Import it in other scripts to use its functionality.")
    sys.exit(1)
