"""Fixed physical constants for the gear train simulation."""

import math

# Pitch-circle module in canvas units: radius = teeth * MODULE_SIZE / 2
MODULE_SIZE = 5.0

MIN_TEETH = 8
MAX_TEETH = 48

# Centre-distance slack for two gears to count as meshed
MESH_TOLERANCE = 15.0
# Larger slack used while dragging to pull a gear into mesh
SNAP_TOLERANCE = 30.0

# Outputs attach to a gear whose centre lies within radius + this
OUTPUT_ATTACH_RANGE = 30.0
# Fixed resistance added per attached output
OUTPUT_LOAD = 20.0

# Revolutions per second at 1x spin speed (9 RPM)
BASE_ROTATION_SPEED = 0.15

# Lock detection: |existing - expected| > |existing| * REL + ABS
SPEED_TOLERANCE_REL = 0.01
SPEED_TOLERANCE_ABS = 0.0001

TWO_PI = 2 * math.pi

GEAR_HIT_MARGIN = 8.0

GEAR_COLORS = (
    "#6c5ce7", "#a855f7", "#3498db", "#1abc9c",
    "#e74c3c", "#f39c12", "#e91e63", "#00bcd4",
)

PROJECT_VERSION = "1.0"
