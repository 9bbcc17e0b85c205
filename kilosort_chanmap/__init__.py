"""
Kilosort Channel Map Generator

A Python package for generating Kilosort channel map (chanMap.mat) files,
either from a built-in probe map or from CellExplorer / Neuroscope session
metadata describing legacy probe layouts.
"""

from .backend import *

__version__ = "0.1.0"
