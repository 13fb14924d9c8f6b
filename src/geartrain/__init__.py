"""Planar gear train kinematics: meshing, phase, speed, lock and load."""

__version__ = "0.1.0"
