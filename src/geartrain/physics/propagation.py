"""Speed propagation from the driver with kinematic-conflict detection."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..constants import SPEED_TOLERANCE_ABS, SPEED_TOLERANCE_REL

if TYPE_CHECKING:
    from ..models.state import SimulationState

logger = logging.getLogger(__name__)


@dataclass
class PropagationResult:
    """Outcome of one propagation pass."""

    speeds: dict[str, float] = field(default_factory=dict)
    locked: bool = False
    locked_gear_ids: set[str] = field(default_factory=set)


def speeds_conflict(existing: float, expected: float) -> bool:
    """True if two speeds for the same gear disagree beyond float noise."""
    tolerance = abs(existing) * SPEED_TOLERANCE_REL + SPEED_TOLERANCE_ABS
    return abs(existing - expected) > tolerance


def propagate_speeds(state: SimulationState) -> PropagationResult:
    """Derive every reachable gear's speed from the driver.

    Meshed gears counter-rotate at the inverse tooth ratio. A gear reached a
    second time with a different speed closes an impossible loop: the system
    locks and every gear stops.
    """
    result = PropagationResult()
    state.locked = False
    state.locked_gear_ids = set()

    for gear in state.gears:
        if gear.id != state.driver_gear_id:
            gear.rotation_speed = 0.0

    driver = state.driver
    if driver is None:
        return result

    driver.rotation_speed = state.settings.driver_speed
    result.speeds[driver.id] = driver.rotation_speed

    visited = {driver.id}
    queue = deque([driver])

    while queue:
        current = queue.popleft()
        for connected in state.neighbors(current):
            ratio = current.teeth_count / connected.teeth_count
            expected = -current.rotation_speed * ratio

            if connected.id in visited:
                if speeds_conflict(result.speeds[connected.id], expected):
                    result.locked = True
                    result.locked_gear_ids.update((current.id, connected.id))
                continue

            connected.rotation_speed = expected
            result.speeds[connected.id] = expected
            visited.add(connected.id)
            queue.append(connected)

    if result.locked:
        logger.info("Gear train locked: conflicting ratios at %s", sorted(result.locked_gear_ids))
        for gear in state.gears:
            gear.rotation_speed = 0.0

    state.locked = result.locked
    state.locked_gear_ids = set(result.locked_gear_ids)
    return result
