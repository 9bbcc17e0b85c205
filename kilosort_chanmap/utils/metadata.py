####################################
## Session metadata I/O utilities ##
####################################

import xml.etree.ElementTree as ET
from pathlib import Path

import numpy as np
import scipy.io

from kilosort_chanmap.types import NeuroscopeParams


def load_metadata(metadata_file):
    """
    Read the probe family and electrode groups from a session metadata file.

    Args:
        metadata_file: Path to a CellExplorer session.mat file or a Neuroscope xml file

    Returns:
        tuple: (probe, electrode_groups, params)
               probe: probe family name stored in the metadata
               electrode_groups: list of 0-based channel lists, one per electrode group
               params: NeuroscopeParams for xml files, None for mat files
    """
    suffix = Path(metadata_file).suffix.lower()
    if suffix == ".mat":
        probe, electrode_groups = read_session_mat(metadata_file)
        return probe, electrode_groups, None
    elif suffix == ".xml":
        return read_neuroscope_xml(metadata_file)
    raise ValueError("Unsupported metadata file format. Only MAT and XML formats are supported.")


def read_session_mat(filepath):
    """
    Read a CellExplorer session.mat file.

    The probe family is stored in session.extracellular.equipment and the
    anatomical electrode groups (by shank, brain area, or both) in
    session.extracellular.electrodeGroups.channels.

    Returns:
        tuple: (probe, electrode_groups)
    """
    mat = scipy.io.loadmat(filepath, simplify_cells=True)

    if "session" not in mat:  # Reserved variable
        raise ValueError("Supplied MAT metadata file is missing session info!")
    session = mat["session"]
    if "extracellular" not in session:
        raise ValueError("Supplied MAT metadata file is missing session.extracellular field!")
    extracellular = session["extracellular"]
    if "equipment" not in extracellular:
        raise ValueError("Supplied MAT metadata file is missing session.extracellular.equipment field!")
    if "electrodeGroups" not in extracellular or "channels" not in extracellular["electrodeGroups"]:
        raise ValueError("Supplied MAT metadata file is missing session.extracellular.electrodeGroups.channels field!")

    probe = str(extracellular["equipment"]).strip()
    electrode_groups = _as_channel_groups(extracellular["electrodeGroups"]["channels"])

    return probe, electrode_groups


def _as_channel_groups(channels):
    "Normalise a loaded MATLAB cell array (or matrix) of channels to a list of int lists."
    if isinstance(channels, np.ndarray) and channels.dtype != object:
        if channels.ndim <= 1:  # single group, squeezed by loadmat
            return [np.atleast_1d(channels).astype(int).tolist()]
        return [row.astype(int).tolist() for row in channels]
    if np.isscalar(channels):
        return [[int(channels)]]
    return [np.atleast_1d(np.asarray(group)).ravel().astype(int).tolist() for group in channels]


def read_neuroscope_xml(filepath):
    """
    Read a Neuroscope xml parameter file.

    The probe family is the text of the fourth element of the first section
    (generalInfo) of the document. Anatomical groups give the electrode
    groups; spike groups, when present, are kept in the returned params and
    used to mark channels excluded from spike detection as disconnected.

    Returns:
        tuple: (probe, electrode_groups, params)
    """
    root = ET.parse(filepath).getroot()

    if len(root) == 0 or len(root[0]) < 4 or root[0][3].text is None:
        raise ValueError("Supplied XML metadata file is missing the probe name in its generalInfo section!")
    probe = root[0][3].text.strip()

    anatomical = root.find("anatomicalDescription/channelGroups")
    if anatomical is None:
        raise ValueError("Supplied XML metadata file is missing anatomicalDescription channel groups!")
    anatomical_groups = [
        [int(ch.text) for ch in group.findall("channel") if ch.text is not None]
        for group in anatomical.findall("group")
    ]

    spike_groups = None
    spike_detection = root.find("spikeDetection/channelGroups")
    if spike_detection is not None:
        spike_groups = [
            [int(ch.text) for ch in group.findall("channels/channel") if ch.text is not None]
            for group in spike_detection.findall("group")
        ]

    params = NeuroscopeParams(anatomical_groups=anatomical_groups, spike_groups=spike_groups)

    return probe, anatomical_groups, params
