"""Stereo disparity maps by SSD block matching, with PGM/PPM image I/O, timing and error helpers."""

__version__ = "0.1.0"