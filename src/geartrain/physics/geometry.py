"""Angular geometry primitives shared by the kinematics engine."""

from __future__ import annotations

import math
from typing import Protocol

from ..constants import MODULE_SIZE, TWO_PI


class Toothed(Protocol):
    """Anything with a tooth count and an absolute rotation."""

    teeth_count: int
    rotation: float


def calculate_radius(teeth_count: int) -> float:
    """Pitch radius for a tooth count: teeth * module / 2."""
    return teeth_count * MODULE_SIZE / 2


def angular_pitch(gear: Toothed) -> float:
    """Angle between adjacent teeth."""
    return TWO_PI / gear.teeth_count


def tooth_angle(gear: Toothed, tooth_index: int) -> float:
    """Absolute angle of the centre of tooth ``tooth_index``."""
    return tooth_index * angular_pitch(gear) + gear.rotation


def gap_angle(gear: Toothed, gap_index: int) -> float:
    """Absolute angle of the valley following tooth ``gap_index``."""
    return (gap_index + 0.5) * angular_pitch(gear) + gear.rotation


def normalize_angle(angle: float) -> float:
    """Wrap an angle into (-pi, pi]."""
    wrapped = math.remainder(angle, TWO_PI)
    if wrapped <= -math.pi:
        wrapped += TWO_PI
    return wrapped


def snap_to_grid(value: float, grid_size: float) -> float:
    """Round a coordinate to the nearest grid line."""
    return round(value / grid_size) * grid_size


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)
