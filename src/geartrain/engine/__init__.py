"""Command surface over the gear train simulation."""

from .controller import GearTrainController

__all__ = ["GearTrainController"]
