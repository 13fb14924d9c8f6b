"""Data models for the gear train simulation."""

from .gear import AttachedImage, Gear, Output, OutputType
from .settings import Settings
from .state import SimulationState, SystemStatus

__all__ = [
    "AttachedImage",
    "Gear",
    "Output",
    "OutputType",
    "Settings",
    "SimulationState",
    "SystemStatus",
]
