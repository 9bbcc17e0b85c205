"""Type definitions for the Kilosort channel map generator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np
import pandas as pd

from .constants import SUPPORTED_METADATA_PROBES


class ProbeFamily(str, Enum):
    """Legacy probe families whose geometry is derived from metadata electrode groups."""

    STAGGERED = "staggered"
    NEUROGRID = "neurogrid"
    GRID = "grid"
    POLY3 = "poly3"
    POLY5 = "poly5"
    TWOHUNDRED = "twohundred"

    @classmethod
    def from_name(cls, name, supported=SUPPORTED_METADATA_PROBES):
        """Return the family called `name`, listing the supported ones if there is none."""
        if name not in supported:
            listed = ", ".join(supported[:-1]) + f", and {supported[-1]}" if len(supported) > 1 else supported[0]
            raise ValueError(
                f"Unsupported probe type loaded from the metadata file: {name}. "
                f"The following probes are supported: {listed}."
            )
        return cls(name)


# Note: frozen attributes (@dataclass(frozen=True)) allows hashability
# (thus usability as dictionnary keys or set elements)
@dataclass(frozen=True)
class Channel:
    """One recording channel of a Kilosort channel map (index is 1-based)."""

    index: int
    x: float
    y: float
    group: int
    connected: bool = True

    @property
    def index0(self):
        return self.index - 1


@dataclass(frozen=True)
class NeuroscopeParams:
    """Raw channel groups read from a Neuroscope xml file.

    anatomical_groups: list of 0-based channel lists, one per anatomical group
    spike_groups: list of 0-based channel lists, one per spike group, or None
        if the file has no spike detection section
    """

    anatomical_groups: list
    spike_groups: list | None = None


@dataclass(frozen=True)
class ChannelMap:
    """
    Kilosort channel map, stored as one record per channel.

    The parallel arrays Kilosort expects (chanMap, chanMap0ind, connected,
    xcoords, ycoords, kcoords) are derived from the records, so they always
    share the same length and channel ordering.
    """

    channels: tuple

    def __len__(self):
        return len(self.channels)

    @property
    def chanMap(self):
        return np.array([ch.index for ch in self.channels], dtype=int)

    @property
    def chanMap0ind(self):
        return np.array([ch.index0 for ch in self.channels], dtype=int)

    @property
    def connected(self):
        return np.array([ch.connected for ch in self.channels], dtype=bool)

    @property
    def xcoords(self):
        return np.array([ch.x for ch in self.channels], dtype=float)

    @property
    def ycoords(self):
        return np.array([ch.y for ch in self.channels], dtype=float)

    @property
    def kcoords(self):
        return np.array([ch.group for ch in self.channels], dtype=int)

    @classmethod
    def from_arrays(cls, chanMap, xcoords, ycoords, kcoords, connected=None):
        """Build a channel map from Kilosort-style parallel arrays."""
        chanMap = np.asarray(chanMap).ravel()
        xcoords = np.asarray(xcoords).ravel()
        ycoords = np.asarray(ycoords).ravel()
        kcoords = np.asarray(kcoords).ravel()
        if connected is None:
            connected = np.ones(len(chanMap), dtype=bool)
        connected = np.asarray(connected).ravel()

        assert len(chanMap) == len(xcoords) == len(ycoords) == len(kcoords) == len(connected), \
            "Channel map arrays must all have the same length!"

        channels = tuple(
            Channel(index=int(i), x=float(x), y=float(y), group=int(k), connected=bool(c))
            for i, x, y, k, c in zip(chanMap, xcoords, ycoords, kcoords, connected)
        )
        return cls(channels)

    def to_dataframe(self):
        """One row per channel, columns named after the Kilosort fields."""
        return pd.DataFrame({
            "chanMap": self.chanMap,
            "chanMap0ind": self.chanMap0ind,
            "connected": self.connected,
            "xcoords": self.xcoords,
            "ycoords": self.ycoords,
            "kcoords": self.kcoords,
        })
