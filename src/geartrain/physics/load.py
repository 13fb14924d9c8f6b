"""System load: how much the driven train slows the driver down."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..constants import OUTPUT_LOAD

if TYPE_CHECKING:
    from ..models.gear import Gear
    from ..models.state import SimulationState


@dataclass(frozen=True)
class LoadResult:
    """Speed multiplier in (0, 1] and a 0-100 display percentage."""

    multiplier: float
    percentage: float
    locked: bool = False


def connected_gears(state: SimulationState, start: Gear) -> list[Gear]:
    """Gears reachable from ``start`` through meshes, ``start`` first."""
    visited = {start.id}
    queue = deque([start])
    found = []

    while queue:
        current = queue.popleft()
        found.append(current)
        for connected in state.neighbors(current):
            if connected.id not in visited:
                visited.add(connected.id)
                queue.append(connected)

    return found


def estimate_load(state: SimulationState) -> LoadResult:
    """Resistance of everything the driver turns.

    Each connected gear adds half its radius and each attached output a
    fixed amount. The multiplier ``power / (power + load)`` falls off with
    diminishing returns and never reaches zero; the percentage is a separate
    display scale capped at 100.
    """
    if state.locked:
        return LoadResult(multiplier=0.0, percentage=100.0, locked=True)

    driver = state.driver
    if driver is None:
        return LoadResult(multiplier=1.0, percentage=0.0)

    train = connected_gears(state, driver)
    train_ids = {gear.id for gear in train}

    total_load = sum(gear.radius * 0.5 for gear in train if gear.id != driver.id)
    total_load += OUTPUT_LOAD * sum(
        1 for output in state.outputs if output.attached_to_gear in train_ids
    )

    driver_power = driver.radius * 2
    multiplier = driver_power / (driver_power + total_load)
    percentage = min(100.0, (total_load / driver_power) * 50)

    return LoadResult(multiplier=multiplier, percentage=percentage)
