#!/usr/bin/env python3
"""
batch_processor.py

Utility module for configuration loading and batch processing of hand-data
recordings.

This module provides functions to:
- Load the YAML configuration and merge it over the built-in defaults
- Discover hand-data CSV files in a recordings directory
- Generate output directory names for each processed recording
- Summarize a batch run

Naming Conventions:
    - Recordings: '*.csv' files directly inside the recordings directory
    - Results: '<output>/<recording_name>' or
               '<output>/<recording_name>__<chirality>' when filtered
    - A name already taken in the batch gets a '__2', '__3', ... suffix

Usage:
    from holosync.utils.batch_processor import (load_config, discover_hand_csvs,
                                                claim_output_dirname)

    config = load_config('my_config.yaml')
    recordings = discover_hand_csvs('recordings/')
"""

import copy
import os
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

import yaml


DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
                                   'default_config.yaml')

DEFAULT_CONFIG = {
    'display': {
        'timestamp_precision': 2,
        'position_precision': 3,
        'max_frames_listed': None,
    },
    'filter': {
        'chirality': None,
    },
    'visualization': {
        'enabled': True,
        'skeleton_frame_step': 10,
        'trajectory_joint': 'indexFingerTip',
    },
    'output': {
        'save_results_yaml': True,
        'save_frame_results': True,
        'export_csv': False,
    },
}


# =============================================================================
# CONFIGURATION
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a YAML configuration and merge it over DEFAULT_CONFIG.

    Args:
        config_path (str, optional): Path to the YAML file. If None or the
                                     file does not exist, the defaults are
                                     returned.

    Returns:
        Dict[str, Any]: Complete configuration

    Raises:
        ValueError: If the file cannot be read or is not a YAML mapping
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is None:
        return config

    if not os.path.isfile(config_path):
        print(f"Warning: Config file not found: {config_path}, using defaults")
        return config

    try:
        with open(config_path, 'r') as f:
            user_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file {config_path}: {e}")
    except OSError as e:
        raise ValueError(f"Error reading YAML file {config_path}: {e}")

    if not isinstance(user_config, dict):
        raise ValueError(f"YAML file {config_path} does not contain a mapping")

    return _merge_config(config, user_config)


def _merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge_config(base[key], value)
        else:
            base[key] = value
    return base


# =============================================================================
# RECORDING CSV DISCOVERY
# =============================================================================

def discover_hand_csvs(recordings_dir: str) -> List[Dict[str, str]]:
    """
    Discover all CSV recordings in a directory.

    Args:
        recordings_dir (str): Directory holding the hand-data CSV files

    Returns:
        List[Dict[str, str]]: Sorted by name, each containing:
            - 'recording_name': Filename without extension
            - 'csv_path': Full path to the CSV file
            - 'csv_filename': Filename of the CSV file

    Raises:
        ValueError: If the directory does not exist or holds no CSV files
    """
    if not os.path.isdir(recordings_dir):
        raise ValueError(f"Recordings directory not found: {recordings_dir}")

    recordings = []
    for file in os.listdir(recordings_dir):
        file_path = os.path.join(recordings_dir, file)
        if not os.path.isfile(file_path) or not file.lower().endswith('.csv'):
            continue

        recordings.append({
            'recording_name': os.path.splitext(file)[0],
            'csv_path': file_path,
            'csv_filename': file
        })

    if not recordings:
        raise ValueError(f"No CSV files found in {recordings_dir}")

    recordings.sort(key=lambda x: x['recording_name'])

    print(f"Discovered {len(recordings)} recording(s)")
    for recording in recordings:
        print(f"  - {recording['recording_name']}")

    return recordings


# =============================================================================
# OUTPUT DIRECTORY NAMING
# =============================================================================

def generate_output_dirname(recording_name: str, chirality: Optional[str] = None) -> str:
    """
    Generate a standardized output directory name for a processed recording.

    Directory naming convention:
        {recording_name} or {recording_name}__{chirality}

    Characters that are awkward in paths are replaced by underscores.

    Example:
        >>> generate_output_dirname('hand_data_pivoted 3', 'Right')
        'hand_data_pivoted_3__right'
    """
    safe_name = re.sub(r'[^A-Za-z0-9_.-]+', '_', recording_name).strip('_')
    if chirality:
        safe_chirality = re.sub(r'[^A-Za-z0-9_.-]+', '_', chirality.strip().lower())
        return f"{safe_name}__{safe_chirality}"
    return safe_name


def claim_output_dirname(recording_name: str, chirality: Optional[str],
                         used_names: Set[str]) -> str:
    """
    Output directory name that no earlier recording of the batch has taken.

    Different recordings can sanitize to the same name ('session 1' and
    'session_1'). The second one gets '__2', the third '__3', and so on.
    Names are compared case-insensitively and the claimed name is added to
    `used_names`.

    Example:
        >>> used = set()
        >>> claim_output_dirname('session 1', None, used)
        'session_1'
        >>> claim_output_dirname('session_1', None, used)
        'session_1__2'
    """
    base_name = generate_output_dirname(recording_name, chirality)
    dirname = base_name
    counter = 2
    while dirname.lower() in used_names:
        dirname = f"{base_name}__{counter}"
        counter += 1

    used_names.add(dirname.lower())
    return dirname


# =============================================================================
# BATCH SUMMARY
# =============================================================================

def summarize_batch(batch_results: List[Dict[str, Any]],
                    config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build the summary written at the end of a batch run.

    Args:
        batch_results: One dict per recording with at least 'recording_name'
                       and 'status' ('completed' or 'failed')
        config: Configuration used for the run

    Returns:
        Dict[str, Any]: Summary with counts, total frames and per-recording results
    """
    completed = [r for r in batch_results if r['status'] == 'completed']
    return {
        'timestamp': datetime.now().isoformat(),
        'total_recordings': len(batch_results),
        'completed_recordings': len(completed),
        'failed_recordings': len(batch_results) - len(completed),
        'total_frames': sum(r.get('summary', {}).get('total_frames', 0) for r in completed),
        'configuration': config or {},
        'results': batch_results
    }
