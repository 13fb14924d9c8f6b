"""Simulation state: the single source of truth for one gear train."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .gear import Gear, Output
from .settings import Settings


@dataclass(frozen=True)
class SystemStatus:
    """System-level values read by the rendering layer."""

    locked: bool
    locked_gear_ids: frozenset[str]
    load_percentage: float


@dataclass
class SimulationState:
    """Gears, outputs, driver and the derived lock/load values.

    ``locked``, ``locked_gear_ids`` and ``load_percentage`` are derived:
    propagation and load estimation overwrite them every time they run.
    """

    gears: list[Gear] = field(default_factory=list)
    outputs: list[Output] = field(default_factory=list)
    driver_gear_id: Optional[str] = None
    selected_gear_id: Optional[str] = None
    selected_output_id: Optional[str] = None
    settings: Settings = field(default_factory=Settings)
    is_playing: bool = False
    locked: bool = False
    locked_gear_ids: set[str] = field(default_factory=set)
    load_percentage: float = 0.0
    dirty: bool = False

    def find_gear(self, gear_id: Optional[str]) -> Optional[Gear]:
        if gear_id is None:
            return None
        for gear in self.gears:
            if gear.id == gear_id:
                return gear
        return None

    def find_output(self, output_id: Optional[str]) -> Optional[Output]:
        if output_id is None:
            return None
        for output in self.outputs:
            if output.id == output_id:
                return output
        return None

    @property
    def driver(self) -> Optional[Gear]:
        return self.find_gear(self.driver_gear_id)

    def neighbors(self, gear: Gear) -> list[Gear]:
        """Gears meshed with ``gear``, in gear-list order."""
        return [other for other in self.gears if other.id in gear.meshing_with]

    def status(self) -> SystemStatus:
        return SystemStatus(
            locked=self.locked,
            locked_gear_ids=frozenset(self.locked_gear_ids),
            load_percentage=self.load_percentage,
        )
