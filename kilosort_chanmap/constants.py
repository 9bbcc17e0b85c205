######################
## Global variables ##
######################

# Probes with a pre-built channel map shipped in probe_maps/
SUPPORTED_LOCAL_PROBES = (
    "Neuropixels1_checkerboard",
    # Add more probe designs later
)

# Probe used when neither a probe name nor a metadata file is available
DEFAULT_PROBE = "Neuropixels1_checkerboard"

PROBE_MAP_FILE_MAP = {
    "Neuropixels1_checkerboard": "Neuropixels1_checkerboard.csv",
}

# Legacy probe families whose layout is computed from metadata electrode groups
SUPPORTED_METADATA_PROBES = (
    "staggered",
    "neurogrid",
    "grid",
    "poly3",
    "poly5",
    "twohundred",
)

# Looked up in order under the save path when no metadata file is given
# (CellExplorer session file first, then Neuroscope xml)
DEFAULT_METADATA_FILES = (
    "continuous.session.mat",
    "continuous.xml",
)

METADATA_SUFFIXES = (".mat", ".xml")

CHANMAP_FILENAME = "chanMap.mat"

# Field names read by Kilosort, in the order they are written
CHANMAP_FIELDS = ("chanMap", "chanMap0ind", "connected", "xcoords", "ycoords", "kcoords")

# Legacy layout geometry (arbitrary layout units, roughly microns)
SHANK_SPACING = 200
NEUROGRID_SPACING = 50
NEUROGRID_GROUPS_PER_SHANK = 4  # four electrode groups share one kcoords id

POLY3_COLUMNS = {1: -18, 2: 0, 0: 18}  # (position - extra) % 3 -> x
POLY3_PITCH = 20

POLY5_COLUMNS = {1: -36, 2: -18, 3: 0, 4: 18, 0: 36}  # (position - extra) % 5 -> x
POLY5_PITCH = 28
POLY5_STAGGER = {-36: 0, -18: -14, 0: 0, 18: -14, 36: 0}  # extra y offset per column
