#############
## Imports ##
#############

from pathlib import Path

import matplotlib.patches as patches
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .constants import (
    DEFAULT_METADATA_FILES,
    DEFAULT_PROBE,
    METADATA_SUFFIXES,
    NEUROGRID_GROUPS_PER_SHANK,
    NEUROGRID_SPACING,
    POLY3_COLUMNS,
    POLY3_PITCH,
    POLY5_COLUMNS,
    POLY5_PITCH,
    POLY5_STAGGER,
    PROBE_MAP_FILE_MAP,
    SHANK_SPACING,
    SUPPORTED_LOCAL_PROBES,
    SUPPORTED_METADATA_PROBES,
)
from .types import Channel, ChannelMap, ProbeFamily
from .utils.chanmap import save_channelmap_file
from .utils.metadata import load_metadata

PROBE_MAPS_DIR = Path(__file__).parent / "probe_maps"

############################
## Channel map generation ##
############################


def create_channelmap_file(save_path=None,
                           metadata_file="",
                           probe="",
                           verbose=True):
    """
    Create a Kilosort chanMap.mat file for a recording probe.

    The probe is taken, in order of preference, from the probe name, from
    the metadata file, or from a default metadata file found in save_path
    (continuous.session.mat, then continuous.xml). If none of them is
    available the default probe (Neuropixels1_checkerboard) is assumed.

    Args:
        save_path: Directory where chanMap.mat is saved, typically the folder
            holding the raw data. Defaults to the current working directory.
        metadata_file: CellExplorer session.mat or Neuroscope xml file
            (legacy mode). Ignored if probe is given.
        probe: Name of a probe with a local channel map (see SUPPORTED_LOCAL_PROBES).
        verbose: Print progress notices

    Returns:
        tuple: (chanmap_file, probe)
               chanmap_file: absolute Path of the saved chanMap.mat
               probe: name of the probe the channel map was produced for
    """

    if not save_path:
        save_path = Path.cwd()

    # 1) Work out where the probe description comes from
    metadata_file, probe, from_metadata = resolve_metadata(save_path, metadata_file, probe)

    # 2) Parse metadata
    if from_metadata:  # Legacy mode
        _notify("Loading probe metadata", verbose)
        probe, electrode_groups, params = load_metadata(metadata_file)
        ProbeFamily.from_name(probe)
    else:
        _notify("Inferring probe metadata", verbose)

    # 3) Construct the channel map
    _notify("Constructing the probe channel map", verbose)
    if from_metadata:
        channel_map = map_from_metadata(probe, electrode_groups, params)
    else:
        channel_map = map_from_local(probe)

    # 4) Save it for Kilosort
    _notify("Saving the probe channel map file", verbose)
    chanmap_file = save_channelmap_file(channel_map, save_path)
    _notify(f"Channel map file saved: {chanmap_file}", verbose)

    return chanmap_file, probe


def resolve_metadata(save_path,
                     metadata_file="",
                     probe="",
                     supported_probes=SUPPORTED_LOCAL_PROBES,
                     default_probe=DEFAULT_PROBE,
                     default_metadata_files=DEFAULT_METADATA_FILES):
    """
    Decide whether the channel map comes from a local probe map or from metadata.

    Returns:
        tuple: (metadata_file, probe, from_metadata)
               metadata_file: Path of the metadata file to load, or None
               probe: local probe name, or "" when it has to be read from metadata
               from_metadata: True if the legacy metadata path must be taken
    """

    if probe:
        if probe not in supported_probes:
            raise ValueError(f"Probe {probe} is not supported. Supported probes: {', '.join(supported_probes)}")
        return None, probe, False

    if metadata_file:
        metadata_file = Path(metadata_file)
        if not metadata_file.is_file():
            raise FileNotFoundError(
                f"The supplied metadata file ({metadata_file}) does not exist and the probe name not specified: "
                "Unable to infer probe metadata."
            )
        if metadata_file.suffix.lower() not in METADATA_SUFFIXES:
            raise ValueError("Unsupported metadata file format. Only MAT and XML formats are supported.")
        return metadata_file, "", True

    for filename in default_metadata_files:
        candidate = Path(save_path) / filename
        if candidate.is_file():
            return candidate, "", True

    return None, default_probe, False


def map_from_local(probe, probe_maps_dir=PROBE_MAPS_DIR):
    "Load the pre-built channel map of a probe from probe_maps/."

    assert probe in PROBE_MAP_FILE_MAP, f"No local channel map available for probe {probe}!"

    probe_df = pd.read_csv(Path(probe_maps_dir) / PROBE_MAP_FILE_MAP[probe])

    return ChannelMap.from_arrays(
        chanMap=probe_df["chanMap"].values,
        xcoords=probe_df["xcoords"].values,
        ycoords=probe_df["ycoords"].values,
        kcoords=probe_df["kcoords"].values,
        connected=probe_df["connected"].values,
    )


def map_from_metadata(probe, electrode_groups, params=None):
    """
    Compute the channel map of a legacy probe family from its electrode groups.

    Args:
        probe: Probe family name or ProbeFamily
        electrode_groups: list of 0-based channel lists, one per electrode group (shank)
        params: Optional NeuroscopeParams. Channels of its anatomical groups that
            are missing from its spike groups are marked as disconnected.

    Returns:
        ChannelMap sorted by original channel number, with chanMap = 1..N
    """

    family = ProbeFamily.from_name(probe)
    if sum(len(group) for group in electrode_groups) == 0:
        raise ValueError(f"No electrode groups found for {family.value} probe!")

    layout = LAYOUT_FUNCTIONS[family]
    disconnected = find_disconnected_channels(params)

    # Collect channels in group traversal order: (channel, x, y, group_id)
    entries = []
    for a, group in enumerate(electrode_groups, start=1):
        x, y = layout(a, len(group))
        group_id = get_group_id(family, a)
        for channel, cx, cy in zip(group, x, y):
            entries.append((int(channel), float(cx), float(cy), group_id))

    # Reorder by original channel number (stable), chanMap becomes positional
    entries.sort(key=lambda e: e[0])
    channels = tuple(
        Channel(index=i, x=x, y=y, group=group_id, connected=channel not in disconnected)
        for i, (channel, x, y, group_id) in enumerate(entries, start=1)
    )

    return ChannelMap(channels)


def get_group_id(family, a):
    "kcoords value of 1-based electrode group a."
    if family == ProbeFamily.NEUROGRID:
        return (a - 1) // NEUROGRID_GROUPS_PER_SHANK + 1
    return a


def find_disconnected_channels(params):
    "Channels listed in anatomical groups but not in spike groups."
    if params is None or params.spike_groups is None:
        return set()

    anatomical = [ch for group in params.anatomical_groups for ch in group]
    spiking = {ch for group in params.spike_groups for ch in group}

    return {ch for ch in anatomical if ch not in spiking}


#############################
## Legacy probe geometries ##
#############################

# Each layout takes the 1-based group index a and the number of channels in
# the group, and returns the group's x and y coordinates in channel order.


def staggered_layout(a, n):
    i = np.arange(1, n + 1)
    x = np.where(i % 2 == 1, 20, -20) + a * SHANK_SPACING
    y = -i * 20
    return x.astype(float), y.astype(float)


def poly3_layout(a, n):
    extra = n % 3
    x = np.zeros(n)
    polyline = np.arange(1, n - extra + 1) % 3
    x[extra:] = [POLY3_COLUMNS[p] for p in polyline]

    y = np.zeros(n)
    for column in (-18, 18):
        in_column = x == column
        y[in_column] = np.arange(1, in_column.sum() + 1) * -POLY3_PITCH
    # middle column sits half a pitch lower, shifted up by the leftover channels on top
    in_column = x == 0
    y[in_column] = np.arange(1, in_column.sum() + 1) * -POLY3_PITCH - POLY3_PITCH / 2 + extra * POLY3_PITCH

    return x + a * SHANK_SPACING, y


def poly5_layout(a, n):
    extra = n % 5
    x = np.zeros(n)
    polyline = np.arange(1, n - extra + 1) % 5
    x[extra:] = [POLY5_COLUMNS[p] for p in polyline]
    x[:extra] = 18 * (-1.0) ** np.arange(1, extra + 1)

    y = np.zeros(n)
    for column, stagger in POLY5_STAGGER.items():
        in_column = x == column
        y[in_column] = np.arange(1, in_column.sum() + 1) * -POLY5_PITCH + stagger

    return x + a * SHANK_SPACING, y


def neurogrid_layout(a, n):
    i = np.arange(1, n + 1)
    x = (n - i) + a * NEUROGRID_SPACING
    y = -i * NEUROGRID_SPACING
    return x.astype(float), y.astype(float)


def twohundred_layout(a, n):
    i = np.arange(1, n + 1)
    x = np.full(n, (a - 1) * SHANK_SPACING, dtype=float)
    y = np.where(i % 2 == 1, 0.0, 200.0)
    return x, y


def grid_layout(a, n):
    raise ValueError("No channel layout is defined for grid probes.")


LAYOUT_FUNCTIONS = {
    ProbeFamily.STAGGERED: staggered_layout,
    ProbeFamily.NEUROGRID: neurogrid_layout,
    ProbeFamily.GRID: grid_layout,
    ProbeFamily.POLY3: poly3_layout,
    ProbeFamily.POLY5: poly5_layout,
    ProbeFamily.TWOHUNDRED: twohundred_layout,
}
assert set(LAYOUT_FUNCTIONS) == set(ProbeFamily), "Every probe family needs a layout function!"
assert set(SUPPORTED_METADATA_PROBES) == {f.value for f in ProbeFamily}


def _notify(message, verbose=True):
    if verbose:
        print(message)


##########################
## Channel map plotting ##
##########################

def plot_channel_map(channel_map,
                     title="",
                     figsize=(4, 12),
                     save_plot=False,
                     saveDir=None):
    """
    Plot electrode positions of a channel map, one colour per group (kcoords).

    Disconnected channels are drawn in black.
    """

    # Format parameters
    disconnected_color = "black"
    electrode_width = 8
    electrode_height = 8
    cmap = plt.get_cmap("tab10")

    df = channel_map.to_dataframe()
    groups = np.unique(df["kcoords"])

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    for _, row in df.iterrows():
        if row["connected"]:
            color = cmap(int(np.searchsorted(groups, row["kcoords"])) % cmap.N)
        else:
            color = disconnected_color
        rect = patches.Rectangle((row["xcoords"] - electrode_width / 2, row["ycoords"] - electrode_height / 2),
                                 electrode_width, electrode_height,
                                 linewidth=0, facecolor=color)
        ax.add_patch(rect)

    margin = 50
    ax.set_xlim(df["xcoords"].min() - margin, df["xcoords"].max() + margin)
    ax.set_ylim(df["ycoords"].min() - margin, df["ycoords"].max() + margin)
    ax.set_title(title)
    ax.set_xlabel("x (layout units)")
    ax.set_ylabel("y (layout units)")

    # Style the plot - remove top and right frame
    ax.spines['top'].set_visible(False)
    ax.spines['right'].set_visible(False)
    ax.grid(False)

    # Add legend positioned away from probe
    from matplotlib.lines import Line2D
    legend_elements = [
        Line2D([0], [0], marker='s', color='w', markerfacecolor=cmap(i % cmap.N),
               markersize=10, label=f'Group {int(k)}')
        for i, k in enumerate(groups)
    ]
    if not df["connected"].all():
        legend_elements.append(Line2D([0], [0], marker='s', color='w', markerfacecolor=disconnected_color,
                                      markersize=10, label='Disconnected'))
    ax.legend(title="Channels:", handles=legend_elements, bbox_to_anchor=(1.05, 1), loc="upper left")

    plt.tight_layout()

    if save_plot:
        if saveDir is None:
            saveDir = Path.cwd()
        pdf_filename = "_".join((title or "chanMap").replace("\n", " ").split(" ")) + ".pdf"
        plt.savefig(Path(saveDir) / pdf_filename, dpi=300, bbox_inches='tight')

    return fig
