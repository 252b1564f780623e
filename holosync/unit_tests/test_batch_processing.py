#!/usr/bin/env python3
"""
Unit tests for configuration loading, batch processing, plotting and the
command-line tools.

Tests include:
- YAML configuration defaults and overrides
- Recording discovery and output directory naming
- End-to-end batch run over a temporary recordings directory
- Separate outputs for recordings whose names sanitize alike
- Plot generation
- Viewer listing and exit codes
"""

import os
import shutil
import sys
import tempfile

import matplotlib
matplotlib.use('Agg')

from holosync import batch_hand_processor, hand_data_viewer
from holosync.utils.batch_processor import (DEFAULT_CONFIG, DEFAULT_CONFIG_PATH,
                                            claim_output_dirname, discover_hand_csvs,
                                            generate_output_dirname, load_config,
                                            summarize_batch)
from holosync.utils.csv_handling import read_hands_from_csv
from holosync.utils.graph_utils import describe_plots, generate_all_hand_plots
from holosync.utils.results_handler import ResultsManager

CSV_PATH = os.path.join(os.path.dirname(__file__), 'test_hand_data.csv')


def test_config_loading():
    """Test default and overridden configuration."""
    print("Testing configuration loading...")

    assert load_config() == DEFAULT_CONFIG
    assert load_config(DEFAULT_CONFIG_PATH) == DEFAULT_CONFIG, \
        "Packaged default_config.yaml should match DEFAULT_CONFIG"
    assert load_config('/nonexistent/config.yaml') == DEFAULT_CONFIG
    print("  Defaults: +")

    with tempfile.TemporaryDirectory() as tmp_dir:
        path = os.path.join(tmp_dir, 'config.yaml')
        with open(path, 'w') as f:
            f.write("display:\n  position_precision: 5\nfilter:\n  chirality: right\n")
        config = load_config(path)

        assert config['display']['position_precision'] == 5
        assert config['display']['timestamp_precision'] == 2
        assert config['filter']['chirality'] == 'right'
        assert DEFAULT_CONFIG['filter']['chirality'] is None, "Defaults must not be mutated"
        print("  Overrides: +")

        bad = os.path.join(tmp_dir, 'bad.yaml')
        with open(bad, 'w') as f:
            f.write("- just\n- a list\n")
        try:
            load_config(bad)
            assert False, "Non-mapping config should raise"
        except ValueError:
            pass

    print("+ Configuration tests passed!")


def test_discovery_and_naming():
    """Test CSV discovery and output naming."""
    print("\nTesting discovery and naming...")

    with tempfile.TemporaryDirectory() as tmp_dir:
        for name in ['b.csv', 'a.CSV', 'notes.txt']:
            open(os.path.join(tmp_dir, name), 'w').close()
        os.mkdir(os.path.join(tmp_dir, 'sub.csv'))

        recordings = discover_hand_csvs(tmp_dir)
        assert [r['recording_name'] for r in recordings] == ['a', 'b']
        assert recordings[0]['csv_filename'] == 'a.CSV'

        empty_dir = os.path.join(tmp_dir, 'empty')
        os.mkdir(empty_dir)
        try:
            discover_hand_csvs(empty_dir)
            assert False, "Directory without CSVs should raise"
        except ValueError:
            pass

    try:
        discover_hand_csvs('/nonexistent/recordings')
        assert False, "Missing directory should raise"
    except ValueError:
        pass

    assert generate_output_dirname('hand_data_pivoted 3') == 'hand_data_pivoted_3'
    assert generate_output_dirname('hand_data_pivoted 3', ' Right') == 'hand_data_pivoted_3__right'

    used = set()
    assert claim_output_dirname('session 1', None, used) == 'session_1'
    assert claim_output_dirname('session_1', None, used) == 'session_1__2'
    assert claim_output_dirname('Session_1', None, used) == 'Session_1__3'
    assert claim_output_dirname('session 1', 'left', used) == 'session_1__left'
    assert used == {'session_1', 'session_1__2', 'session_1__3', 'session_1__left'}

    summary = summarize_batch([
        {'recording_name': 'a', 'status': 'completed', 'summary': {'total_frames': 4}},
        {'recording_name': 'b', 'status': 'failed', 'error': 'no frames loaded'},
    ])
    assert summary['completed_recordings'] == 1
    assert summary['failed_recordings'] == 1
    assert summary['total_frames'] == 4
    print("+ Discovery and naming tests passed!")


def test_plot_generation():
    """Test that plots are written."""
    print("\nTesting plot generation...")

    hands = read_hands_from_csv(CSV_PATH)

    with tempfile.TemporaryDirectory() as tmp_dir:
        saved = generate_all_hand_plots(hands, os.path.join(tmp_dir, 'plots'),
                                        skeleton_frame_step=2)
        for path in saved:
            assert os.path.isfile(path), f"Missing plot {path}"

        assert describe_plots(saved) == {'fingertip_trajectories': 1, 'over_time': 1,
                                         'skeleton': 3}
        assert generate_all_hand_plots([], os.path.join(tmp_dir, 'none')) == []
        assert not os.path.exists(os.path.join(tmp_dir, 'none'))

    print("+ Plot generation tests passed!")


def test_batch_run():
    """Test a full batch over two recordings, one of them empty."""
    print("\nTesting batch run...")

    with tempfile.TemporaryDirectory() as tmp_dir:
        recordings_dir = os.path.join(tmp_dir, 'recordings')
        output_dir = os.path.join(tmp_dir, 'results')
        os.mkdir(recordings_dir)
        shutil.copy(CSV_PATH, os.path.join(recordings_dir, 'session 1.csv'))
        with open(os.path.join(recordings_dir, 'header_only.csv'), 'w') as f:
            f.write('t_mono,t_wall,chirality\n')

        exit_code = batch_hand_processor.main([recordings_dir, '-o', output_dir,
                                               '--chirality', 'left', '--export-csv'])
        assert exit_code == 1, "The empty recording should fail the batch"

        summary = ResultsManager().load_results(os.path.join(output_dir, 'batch_summary.yaml'))
        assert summary['total_recordings'] == 2
        assert summary['completed_recordings'] == 1
        assert summary['total_frames'] == 3

        rec_dir = os.path.join(output_dir, 'session_1__left')
        results = ResultsManager().load_results(os.path.join(rec_dir, 'hand_data_results.yaml'))
        assert results['summary']['frames_by_chirality'] == {'left': 3}
        assert results['additional_metadata']['plots']['fingertip_trajectories'] == 1
        assert os.path.isfile(os.path.join(rec_dir, 'plots', 'fingertip_trajectories.png'))

        exported = read_hands_from_csv(os.path.join(rec_dir, 'session 1.csv'))
        assert [h.t_mono for h in exported] == [0.0, 1.0, 0.0]

        assert batch_hand_processor.main([os.path.join(tmp_dir, 'missing')]) == 1

    print("+ Batch run tests passed!")


def test_batch_name_collisions():
    """Test that recordings with the same sanitized name keep separate outputs."""
    print("\nTesting batch output name collisions...")

    with tempfile.TemporaryDirectory() as tmp_dir:
        recordings_dir = os.path.join(tmp_dir, 'recordings')
        output_dir = os.path.join(tmp_dir, 'results')
        os.mkdir(recordings_dir)
        shutil.copy(CSV_PATH, os.path.join(recordings_dir, 'session 1.csv'))
        with open(os.path.join(recordings_dir, 'session_1.csv'), 'w') as f:
            f.write('t_mono,t_wall,chirality\n9.0,9.5,right\n')

        assert batch_hand_processor.main([recordings_dir, '-o', output_dir,
                                          '--no-visualize']) == 0

        first = ResultsManager().load_results(
            os.path.join(output_dir, 'session_1', 'hand_data_results.yaml'))
        second = ResultsManager().load_results(
            os.path.join(output_dir, 'session_1__2', 'hand_data_results.yaml'))
        assert first['recording_metadata']['source_name'] == 'session 1'
        assert first['summary']['total_frames'] == 5
        assert second['recording_metadata']['source_name'] == 'session_1'
        assert second['summary']['total_frames'] == 1

        summary = ResultsManager().load_results(os.path.join(output_dir, 'batch_summary.yaml'))
        assert [r['output_dir'] for r in summary['results']] == [
            os.path.join(output_dir, 'session_1'), os.path.join(output_dir, 'session_1__2')]

    print("+ Name collision tests passed!")


def test_viewer():
    """Test the frame listing command."""
    print("\nTesting viewer...")

    with tempfile.TemporaryDirectory() as tmp_dir:
        assert hand_data_viewer.main([CSV_PATH, '--output', tmp_dir]) == 0
        assert hand_data_viewer.main([CSV_PATH, '--frame', '3']) == 0
        assert hand_data_viewer.main([CSV_PATH, '--frame', '9']) == 1
        assert hand_data_viewer.main([os.path.join(tmp_dir, 'missing.csv')]) == 1
        assert hand_data_viewer.main([CSV_PATH, '--chirality', 'up']) == 1

        assert hand_data_viewer.main([CSV_PATH, '--chirality', 'right',
                                      '--output', tmp_dir, '--export-csv', '--plot']) == 0
        exported = read_hands_from_csv(os.path.join(tmp_dir, 'test_hand_data_filtered.csv'))
        assert [h.chirality for h in exported] == ['right', 'right']
        assert os.path.isdir(os.path.join(tmp_dir, 'test_hand_data_plots'))

    hands = read_hands_from_csv(CSV_PATH)
    lines = hand_data_viewer.format_frame(0, hands[0])
    assert lines[:3] == ["Frame 0", "  - Timestamp: 0.00", "  - Chirality: left"]
    assert lines[4] == "    - Thumb:  (0.050, 0.100, -0.050)"
    assert len(lines) == 9

    assert hand_data_viewer.format_frame(4, hands[4]) == [
        "Frame 4", "  - Timestamp: 0.00", "  - Chirality: left"]

    detail = hand_data_viewer.format_frame_detail(3, hands[3])
    assert "  joints:    10/26" in detail
    assert any(line.startswith("  littleFingerTip") and line.endswith("missing")
               for line in detail)
    print("+ Viewer tests passed!")


def main():
    """Run all batch processing tests."""
    print("Running batch processing unit tests...")
    print("=" * 60)

    try:
        test_config_loading()
        test_discovery_and_naming()
        test_plot_generation()
        test_batch_run()
        test_batch_name_collisions()
        test_viewer()

        print("\n" + "=" * 60)
        print("*** ALL BATCH PROCESSING TESTS PASSED! ***")

    except Exception as e:
        print(f"\n*** TEST FAILED: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
