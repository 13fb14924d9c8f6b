"""Mesh detection: which gears touch, and pulling a dragged gear into mesh."""

from __future__ import annotations

import logging
import math
from itertools import combinations
from typing import TYPE_CHECKING

from ..constants import MESH_TOLERANCE, SNAP_TOLERANCE
from .geometry import angular_pitch, distance, normalize_angle
from .phase import resolve_phase_offsets
from .propagation import propagate_speeds

if TYPE_CHECKING:
    from ..models.gear import Gear
    from ..models.state import SimulationState

logger = logging.getLogger(__name__)


def _center_gap(gear_a: Gear, gear_b: Gear) -> float:
    """How far the centre distance is from the ideal mesh distance."""
    dist = distance(gear_a.x, gear_a.y, gear_b.x, gear_b.y)
    return abs(dist - (gear_a.radius + gear_b.radius))


def detect_meshing(gear_a: Gear, gear_b: Gear) -> bool:
    """True if the two pitch circles touch within MESH_TOLERANCE."""
    return _center_gap(gear_a, gear_b) < MESH_TOLERANCE


def can_approach(gear_a: Gear, gear_b: Gear) -> bool:
    """True if a dragged gear is close enough to snap into mesh."""
    return _center_gap(gear_a, gear_b) < SNAP_TOLERANCE


def align_teeth_for_meshing(gear: Gear, neighbor: Gear) -> None:
    """Rotate ``gear`` so a valley faces the contact point with ``neighbor``."""
    contact_angle = math.atan2(gear.y - neighbor.y, gear.x - neighbor.x)
    contact_from_gear = contact_angle + math.pi

    pitch = angular_pitch(gear)
    gap_offset = normalize_angle(gear.rotation + 0.5 * pitch - contact_from_gear)
    gear.rotation = normalize_angle(gear.rotation - gap_offset)


def snap_to_mesh(moving: Gear, target: Gear) -> None:
    """Place ``moving`` at exact mesh distance from ``target``.

    The direction from target to moving is preserved. Only this pair is
    phased; call :func:`rebuild_adjacency` afterwards to refresh the train.
    """
    angle = math.atan2(moving.y - target.y, moving.x - target.x)
    mesh_dist = moving.radius + target.radius

    moving.x = target.x + math.cos(angle) * mesh_dist
    moving.y = target.y + math.sin(angle) * mesh_dist

    align_teeth_for_meshing(moving, target)


def rebuild_adjacency(state: SimulationState) -> None:
    """Recompute every gear's ``meshing_with`` from positions.

    With a driver set, phase offsets and speeds are re-derived as well.
    """
    for gear in state.gears:
        gear.meshing_with.clear()

    for gear_a, gear_b in combinations(state.gears, 2):
        if detect_meshing(gear_a, gear_b):
            gear_a.meshing_with.add(gear_b.id)
            gear_b.meshing_with.add(gear_a.id)

    logger.debug(
        "Rebuilt adjacency for %d gears (%d meshes)",
        len(state.gears),
        sum(len(g.meshing_with) for g in state.gears) // 2,
    )

    if state.driver_gear_id:
        resolve_phase_offsets(state)
        propagate_speeds(state)
