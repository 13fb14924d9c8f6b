"""Pydantic models for simulation settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..constants import BASE_ROTATION_SPEED


class Settings(BaseModel):
    """User-adjustable simulation and display settings.

    Stored projects use camelCase keys (``spinSpeed``); both spellings are
    accepted on input and assignment is validated.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    grid_snap: bool = Field(default=True, description="Snap dragged items to the grid")
    grid_size: int = Field(default=20, gt=0, description="Grid spacing in canvas units")
    auto_spin_enabled: bool = Field(default=False)
    spin_speed: float = Field(default=1.0, gt=0, le=10, description="Driver speed multiplier")
    spin_direction: Literal[1, -1] = Field(
        default=1, description="1 = clockwise, -1 = counter-clockwise"
    )
    tooth_thickness: float = Field(
        default=0.6, ge=0.3, le=0.7, description="Tooth width as a fraction of angular pitch"
    )
    tooth_depth: int = Field(default=4, ge=4, le=14, description="Tooth height in canvas units")
    background_color: str = Field(default="#1a1a2e")

    @field_validator("background_color")
    @classmethod
    def validate_color(cls, value: str) -> str:
        if not (value.startswith("#") and len(value) in (4, 7)):
            raise ValueError(f"background_color must be a hex colour, got {value!r}")
        int(value[1:], 16)
        return value

    @property
    def driver_speed(self) -> float:
        """Signed driver speed before load, in revolutions per second."""
        return self.spin_speed * self.spin_direction * BASE_ROTATION_SPEED
