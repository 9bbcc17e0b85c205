"""
Pytest fixtures shared across all tests.

Provides session folders with CellExplorer session.mat and Neuroscope xml
metadata files for testing.
"""

import matplotlib
import numpy as np
import pytest
import scipy.io
from pathlib import Path

matplotlib.use("Agg")


@pytest.fixture
def probe_maps_dir():
    """Path to built-in probe maps directory."""
    return Path(__file__).parent.parent / "kilosort_chanmap" / "probe_maps"


@pytest.fixture
def session_dir(tmp_path):
    """Empty recording session folder."""
    session = tmp_path / "session"
    session.mkdir()
    return session


@pytest.fixture
def write_neuroscope_xml():
    """Return a function writing a Neuroscope xml file with the given probe and channel groups."""

    def _write(filepath, probe, anatomical_groups, spike_groups=None):
        anat_xml = "".join(
            "<group>" + "".join(f'<channel skip="0">{ch}</channel>' for ch in group) + "</group>"
            for group in anatomical_groups
        )
        spike_xml = ""
        if spike_groups is not None:
            spike_xml = "<spikeDetection><channelGroups>" + "".join(
                "<group><channels>" + "".join(f"<channel>{ch}</channel>" for ch in group)
                + "</channels><nSamples>32</nSamples><peakSampleIndex>16</peakSampleIndex></group>"
                for group in spike_groups
            ) + "</channelGroups></spikeDetection>"

        content = (
            '<?xml version="1.0"?>\n'
            '<parameters creator="neuroscope-2.0.0" version="1.0">'
            "<generalInfo><date>2023-01-01</date><experimenters/><description>test</description>"
            f"<notes>{probe}</notes></generalInfo>"
            "<acquisitionSystem><nBits>16</nBits><nChannels>"
            f"{sum(len(g) for g in anatomical_groups)}</nChannels></acquisitionSystem>"
            f"<anatomicalDescription><channelGroups>{anat_xml}</channelGroups></anatomicalDescription>"
            f"{spike_xml}"
            "</parameters>\n"
        )
        Path(filepath).write_text(content)
        return Path(filepath)

    return _write


@pytest.fixture
def write_session_mat():
    """Return a function writing a CellExplorer session.mat file with the given probe and channel groups."""

    def _write(filepath, probe, electrode_groups):
        channels = np.empty(len(electrode_groups), dtype=object)
        for i, group in enumerate(electrode_groups):
            channels[i] = np.array(group, dtype=float)
        session = {
            "general": {"name": "test_session"},
            "extracellular": {
                "equipment": probe,
                "electrodeGroups": {"channels": channels},
            },
        }
        scipy.io.savemat(str(filepath), {"session": session})
        return Path(filepath)

    return _write
