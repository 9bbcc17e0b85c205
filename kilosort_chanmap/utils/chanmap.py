##########################################
## Kilosort chanMap file I/O utilities ##
##########################################

import os
import tempfile
from pathlib import Path

import numpy as np
import scipy.io

from kilosort_chanmap.constants import CHANMAP_FILENAME
from kilosort_chanmap.types import ChannelMap


def save_channelmap_file(channel_map, save_dir, filename=CHANMAP_FILENAME):
    """
    Save a channel map to a Kilosort chanMap.mat file, overwriting any existing one.

    The file is written next to its destination and renamed into place,
    so a failed write never leaves a truncated chanMap.mat behind.

    Args:
        channel_map: ChannelMap to save
        save_dir: Directory the file is written to
        filename: Output filename (default: "chanMap.mat")

    Returns:
        Absolute Path of the saved file
    """
    save_dir = Path(save_dir).resolve()
    filepath = save_dir / filename

    mdict = {
        "chanMap": channel_map.chanMap.astype("float64"),
        "chanMap0ind": channel_map.chanMap0ind.astype("float64"),
        "connected": channel_map.connected,
        "xcoords": channel_map.xcoords,
        "ycoords": channel_map.ycoords,
        "kcoords": channel_map.kcoords.astype("float64"),
    }

    fd, tmp_path = tempfile.mkstemp(suffix=".mat", prefix=".chanMap_", dir=save_dir)
    try:
        f = os.fdopen(fd, "wb")
    except BaseException:
        os.close(fd)
        os.unlink(tmp_path)
        raise
    try:
        with f:
            scipy.io.savemat(f, mdict, oned_as="column")
        # mkstemp creates 0600 files, give chanMap.mat the usual umask-based mode
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(tmp_path, 0o666 & ~umask)
        os.replace(tmp_path, filepath)
    except BaseException:
        os.unlink(tmp_path)
        raise

    return filepath


def read_channelmap_file(filepath):
    """
    Read a Kilosort chanMap.mat file back into a ChannelMap.

    chanMap0ind is not read: it is always chanMap - 1.
    """
    mat = scipy.io.loadmat(filepath, squeeze_me=True)

    return ChannelMap.from_arrays(
        chanMap=np.atleast_1d(mat["chanMap"]).astype(int),
        xcoords=np.atleast_1d(mat["xcoords"]),
        ycoords=np.atleast_1d(mat["ycoords"]),
        kcoords=np.atleast_1d(mat["kcoords"]).astype(int),
        connected=np.atleast_1d(mat["connected"]).astype(bool),
    )
