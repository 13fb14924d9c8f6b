"""Phase offsets so that meshed teeth interlock."""

from __future__ import annotations

import math
from collections import deque
from typing import TYPE_CHECKING

from .geometry import angular_pitch, normalize_angle

if TYPE_CHECKING:
    from ..models.gear import Gear
    from ..models.state import SimulationState


def mesh_phase_offset(parent: Gear, child: Gear) -> float:
    """Phase offset for ``child`` so its valley meets ``parent``'s tooth.

    Parent teeth sit at ``rotation + i * pitch``; child valleys at
    ``rotation + (i + 0.5) * pitch``. The contact point seen from the child
    is the parent-to-child direction turned by pi. The ratio term accounts
    for the child counter-rotating at parent/child teeth.
    """
    contact_angle = math.atan2(child.y - parent.y, child.x - parent.x)
    contact_from_child = contact_angle + math.pi
    child_pitch = angular_pitch(child)
    ratio = parent.teeth_count / child.teeth_count

    offset = contact_from_child - child_pitch / 2 + contact_angle * ratio
    return normalize_angle(offset)


def resolve_phase_offsets(state: SimulationState) -> None:
    """Assign phase offsets breadth-first from the driver.

    Only the first edge that reaches a gear sets its phase; gears off the
    driver's component keep whatever phase they had.
    """
    driver = state.driver
    if driver is None:
        return

    driver.phase_offset = 0.0

    visited = {driver.id}
    queue = deque([driver])

    while queue:
        current = queue.popleft()
        for connected in state.neighbors(current):
            if connected.id in visited:
                continue
            connected.phase_offset = mesh_phase_offset(current, connected)
            visited.add(connected.id)
            queue.append(connected)
