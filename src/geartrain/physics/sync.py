"""Per-tick rotation synchronization and output mirroring."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.gear import Gear
    from ..models.state import SimulationState


def synchronize_rotations(state: SimulationState, driver: Gear) -> None:
    """Set every gear reachable from ``driver`` from its parent's rotation.

    Rotations are derived, not integrated, so teeth cannot drift apart over
    a long session. Each child follows its immediate parent:
    ``-(parent.rotation * ratio) + child.phase_offset``.
    """
    visited = {driver.id}
    queue = deque([(driver, 1.0)])

    while queue:
        current, speed_multiplier = queue.popleft()
        for connected in state.neighbors(current):
            if connected.id in visited:
                continue

            ratio = current.teeth_count / connected.teeth_count
            connected.rotation = -(current.rotation * ratio) + connected.phase_offset

            # Cumulative ratio from the driver, for the RPM readout
            child_multiplier = -speed_multiplier * ratio
            connected.rotation_speed = driver.rotation_speed * child_multiplier

            visited.add(connected.id)
            queue.append((connected, child_multiplier))


def mirror_outputs(state: SimulationState) -> None:
    """Copy rotation and position from each attached gear to its output."""
    for output in state.outputs:
        gear = state.find_gear(output.attached_to_gear)
        if gear is None:
            continue
        output.rotation = gear.rotation
        output.x = gear.x
        output.y = gear.y
