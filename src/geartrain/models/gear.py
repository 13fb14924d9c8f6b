"""Gear and output data model."""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..constants import GEAR_COLORS, MAX_TEETH, MIN_TEETH
from ..physics.geometry import calculate_radius


def new_id(prefix: str) -> str:
    """Session-unique id such as ``gear_3f9a1c2b7``."""
    return f"{prefix}_{uuid.uuid4().hex[:9]}"


def validate_teeth(teeth_count: int) -> int:
    if isinstance(teeth_count, bool) or not isinstance(teeth_count, int):
        raise ValueError(f"teeth_count must be a whole number, got {teeth_count!r}")
    if not MIN_TEETH <= teeth_count <= MAX_TEETH:
        raise ValueError(
            f"teeth_count must be between {MIN_TEETH} and {MAX_TEETH}, got {teeth_count}"
        )
    return teeth_count


class OutputType(str, Enum):
    """Kinds of passive props an output can be. Affects rendering only."""

    FAN = "fan"
    CLOCK = "clock"
    PLATFORM = "platform"


OUTPUT_COLORS = {
    OutputType.FAN: "#3498db",
    OutputType.CLOCK: "#2c3e50",
    OutputType.PLATFORM: "#95a5a6",
}

# Hit radius per output type, in canvas units
OUTPUT_HIT_RADII = {
    OutputType.FAN: 55.0,
    OutputType.CLOCK: 45.0,
    OutputType.PLATFORM: 40.0,
}


@dataclass
class AttachedImage:
    """Decorative image that rotates with a gear.

    ``url`` and the transform are the persisted reference. ``resource`` is
    whatever handle an external loader publishes once the image is ready;
    it is never persisted and never read by the kinematics.
    """

    url: str
    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = 1.0
    resource: Optional[Any] = None

    @property
    def is_ready(self) -> bool:
        return self.resource is not None


@dataclass
class Gear:
    """A rigid circular body in the plane."""

    x: float
    y: float
    teeth_count: int
    color: str = ""
    id: str = field(default_factory=lambda: new_id("gear"))
    rotation: float = 0.0
    rotation_speed: float = 0.0  # revolutions per second
    phase_offset: float = 0.0
    meshing_with: set[str] = field(default_factory=set)
    attached_image: Optional[AttachedImage] = None

    def __post_init__(self) -> None:
        validate_teeth(self.teeth_count)
        if not self.color:
            self.color = random.choice(GEAR_COLORS)

    @property
    def radius(self) -> float:
        """Pitch radius; always derived from the tooth count."""
        return calculate_radius(self.teeth_count)

    @property
    def rpm(self) -> float:
        return abs(self.rotation_speed * 60)

    def set_center(self, x: float, y: float) -> None:
        self.x = x
        self.y = y


@dataclass
class Output:
    """A passive rotating prop, optionally attached to a gear by id."""

    type: OutputType
    x: float
    y: float
    id: str = field(default_factory=lambda: new_id("output"))
    rotation: float = 0.0
    attached_to_gear: Optional[str] = None
    color: str = ""

    def __post_init__(self) -> None:
        self.type = OutputType(self.type)
        if not self.color:
            self.color = OUTPUT_COLORS[self.type]

    @property
    def hit_radius(self) -> float:
        return OUTPUT_HIT_RADII[self.type]

    def attach_to(self, gear: Gear) -> None:
        """Attach to ``gear`` and take over its position and rotation."""
        self.attached_to_gear = gear.id
        self.x = gear.x
        self.y = gear.y
        self.rotation = gear.rotation

    def detach(self) -> None:
        self.attached_to_gear = None
