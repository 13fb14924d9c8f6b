"""Gear train kinematics: meshing, phase, speed, rotation and load."""

from .geometry import (
    angular_pitch,
    calculate_radius,
    gap_angle,
    normalize_angle,
    snap_to_grid,
    tooth_angle,
)
from .phase import mesh_phase_offset, resolve_phase_offsets
from .propagation import PropagationResult, propagate_speeds
from .meshing import (
    align_teeth_for_meshing,
    can_approach,
    detect_meshing,
    rebuild_adjacency,
    snap_to_mesh,
)
from .sync import mirror_outputs, synchronize_rotations
from .load import LoadResult, connected_gears, estimate_load

__all__ = [
    "angular_pitch",
    "calculate_radius",
    "gap_angle",
    "normalize_angle",
    "snap_to_grid",
    "tooth_angle",
    "mesh_phase_offset",
    "resolve_phase_offsets",
    "PropagationResult",
    "propagate_speeds",
    "align_teeth_for_meshing",
    "can_approach",
    "detect_meshing",
    "rebuild_adjacency",
    "snap_to_mesh",
    "mirror_outputs",
    "synchronize_rotations",
    "LoadResult",
    "connected_gears",
    "estimate_load",
]
