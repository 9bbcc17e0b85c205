"""
Test suite for the Kilosort channel map generator.

This test suite validates the core functionality of the generator,
including metadata resolution, legacy probe geometries, built-in probe
maps, metadata file parsing and chanMap.mat file I/O.
"""
