"""Gear train controller - the command surface over one simulation state."""

from __future__ import annotations

import logging
import math
from typing import Optional

from ..constants import GEAR_HIT_MARGIN, OUTPUT_ATTACH_RANGE, TWO_PI
from ..models.gear import AttachedImage, Gear, Output, OutputType, validate_teeth
from ..models.state import SimulationState, SystemStatus
from ..physics import (
    LoadResult,
    can_approach,
    estimate_load,
    mirror_outputs,
    propagate_speeds,
    rebuild_adjacency,
    resolve_phase_offsets,
    snap_to_grid,
    snap_to_mesh,
    synchronize_rotations,
)
from ..physics.geometry import distance

logger = logging.getLogger(__name__)


class GearTrainController:
    """Owns a :class:`SimulationState` and applies commands to it.

    Every topology change (add, delete, move, resize, driver change) runs
    mesh detection, phase resolution and speed propagation before returning,
    so the next :meth:`tick` never sees a half-updated train. Commands that
    name an unknown gear or output do nothing.
    """

    def __init__(self, state: Optional[SimulationState] = None):
        self.state = state or SimulationState()

    # --- Topology ---

    def refresh(self) -> None:
        """Rebuild adjacency, phases and speeds from the current layout."""
        rebuild_adjacency(self.state)
        if not self.state.driver_gear_id:
            propagate_speeds(self.state)

    def _mark_dirty(self) -> None:
        self.state.dirty = True

    def _missing(self, kind: str, item_id: Optional[str]) -> None:
        logger.debug("Ignoring command for unknown %s %r", kind, item_id)

    # --- Gears ---

    def create_gear(
        self, x: float, y: float, teeth_count: int, color: Optional[str] = None
    ) -> Gear:
        """Place a new gear and rebuild the train."""
        gear = Gear(x=x, y=y, teeth_count=teeth_count, color=color or "")
        self.state.gears.append(gear)
        self._mark_dirty()
        self.refresh()
        logger.debug("Created %s (%d teeth) at (%.1f, %.1f)", gear.id, teeth_count, x, y)
        return gear

    def delete_gear(self, gear_id: str) -> None:
        """Remove a gear, its attached outputs, and any driver/selection on it."""
        gear = self.state.find_gear(gear_id)
        if gear is None:
            self._missing("gear", gear_id)
            return

        state = self.state
        state.gears.remove(gear)
        state.outputs = [o for o in state.outputs if o.attached_to_gear != gear_id]

        if state.driver_gear_id == gear_id:
            state.driver_gear_id = None
        if state.selected_gear_id == gear_id:
            state.selected_gear_id = None
        if state.find_output(state.selected_output_id) is None:
            state.selected_output_id = None

        self.refresh()
        self._mark_dirty()

    def update_gear_teeth(self, gear_id: str, teeth_count: int) -> None:
        """Resize a gear; the radius follows the tooth count."""
        validate_teeth(teeth_count)
        gear = self.state.find_gear(gear_id)
        if gear is None:
            self._missing("gear", gear_id)
            return
        gear.teeth_count = teeth_count
        self.refresh()
        self._mark_dirty()

    def update_gear_color(self, gear_id: str, color: str) -> None:
        gear = self.state.find_gear(gear_id)
        if gear is None:
            self._missing("gear", gear_id)
            return
        gear.color = color
        self._mark_dirty()

    def move_gear(self, gear_id: str, x: float, y: float) -> None:
        """Put a gear at an exact position and rebuild the train."""
        gear = self.state.find_gear(gear_id)
        if gear is None:
            self._missing("gear", gear_id)
            return
        gear.set_center(x, y)
        self.refresh()
        self._mark_dirty()

    def drag_gear(self, gear_id: str, x: float, y: float) -> None:
        """Move a gear mid-drag: grid snap, then pull into mesh.

        The first other gear close enough to mesh wins. Adjacency is not
        rebuilt here; finish the gesture with :meth:`end_drag`.
        """
        gear = self.state.find_gear(gear_id)
        if gear is None:
            self._missing("gear", gear_id)
            return

        settings = self.state.settings
        if settings.grid_snap:
            x = snap_to_grid(x, settings.grid_size)
            y = snap_to_grid(y, settings.grid_size)
        gear.set_center(x, y)

        for other in self.state.gears:
            if other.id != gear.id and can_approach(gear, other):
                snap_to_mesh(gear, other)
                break

    def end_drag(self, gear_id: str) -> None:
        if self.state.find_gear(gear_id) is None:
            self._missing("gear", gear_id)
            return
        self.refresh()
        self._mark_dirty()

    # --- Driver ---

    def set_driver_gear(self, gear_id: str) -> None:
        """Make ``gear_id`` the driver and re-derive phases and speeds."""
        driver = self.state.find_gear(gear_id)
        if driver is None:
            self._missing("gear", gear_id)
            return

        self.state.driver_gear_id = gear_id
        for gear in self.state.gears:
            gear.rotation_speed = 0.0

        resolve_phase_offsets(self.state)
        propagate_speeds(self.state)
        self._mark_dirty()
        logger.info("Driver set to %s (%d teeth)", gear_id, driver.teeth_count)

    def clear_driver(self) -> None:
        """Remove the driver; every gear stops."""
        self.state.driver_gear_id = None
        propagate_speeds(self.state)
        self._mark_dirty()

    def toggle_driver(self) -> None:
        """Make the selected gear the driver, or unset it if it already is."""
        selected = self.state.selected_gear_id
        if selected is None:
            return
        if self.state.driver_gear_id == selected:
            self.clear_driver()
        else:
            self.set_driver_gear(selected)

    # --- Attached images ---

    def set_attached_image(self, gear_id: str, url: str) -> None:
        """Attach an image reference; the resource is published later."""
        gear = self.state.find_gear(gear_id)
        if gear is None or not url:
            self._missing("gear", gear_id)
            return
        gear.attached_image = AttachedImage(url=url)
        self._mark_dirty()

    def publish_image_resource(self, gear_id: str, url: str, resource: object) -> None:
        """Hand a loaded image back to its gear.

        Dropped when the gear is gone or has since switched to another url.
        """
        gear = self.state.find_gear(gear_id)
        if gear is None or gear.attached_image is None or gear.attached_image.url != url:
            logger.debug("Discarding stale image resource for %r (%s)", gear_id, url)
            return
        gear.attached_image.resource = resource

    def update_attached_image(
        self,
        gear_id: str,
        offset_x: Optional[float] = None,
        offset_y: Optional[float] = None,
        scale: Optional[float] = None,
    ) -> None:
        gear = self.state.find_gear(gear_id)
        if gear is None or gear.attached_image is None:
            self._missing("gear image", gear_id)
            return
        image = gear.attached_image
        if offset_x is not None:
            image.offset_x = offset_x
        if offset_y is not None:
            image.offset_y = offset_y
        if scale is not None:
            if scale <= 0:
                raise ValueError(f"scale must be positive, got {scale}")
            image.scale = scale
        self._mark_dirty()

    def remove_attached_image(self, gear_id: str) -> None:
        gear = self.state.find_gear(gear_id)
        if gear is None:
            self._missing("gear", gear_id)
            return
        gear.attached_image = None
        self._mark_dirty()

    # --- Outputs ---

    def nearest_gear(self, x: float, y: float) -> Optional[Gear]:
        """Closest gear whose centre is within ``radius + OUTPUT_ATTACH_RANGE``."""
        nearest = None
        nearest_dist = math.inf
        for gear in self.state.gears:
            dist = distance(x, y, gear.x, gear.y)
            if dist < gear.radius + OUTPUT_ATTACH_RANGE and dist < nearest_dist:
                nearest = gear
                nearest_dist = dist
        return nearest

    def create_output(self, output_type: OutputType | str, x: float, y: float) -> Output:
        """Place an output, attaching it to the nearest gear in range."""
        output = Output(type=OutputType(output_type), x=x, y=y)
        gear = self.nearest_gear(x, y)
        if gear is not None:
            output.attach_to(gear)
            output.rotation = 0.0
        self.state.outputs.append(output)
        self._mark_dirty()
        return output

    def move_output(self, output_id: str, x: float, y: float) -> None:
        """Drag an output; it detaches from its gear while moving."""
        output = self.state.find_output(output_id)
        if output is None:
            self._missing("output", output_id)
            return
        settings = self.state.settings
        if settings.grid_snap:
            x = snap_to_grid(x, settings.grid_size)
            y = snap_to_grid(y, settings.grid_size)
        output.x = x
        output.y = y
        output.detach()

    def drop_output(self, output_id: str) -> Optional[Gear]:
        """Finish an output drag; returns the gear it attached to, if any."""
        output = self.state.find_output(output_id)
        if output is None:
            self._missing("output", output_id)
            return None
        gear = self.nearest_gear(output.x, output.y)
        if gear is not None:
            output.attach_to(gear)
        self._mark_dirty()
        return gear

    def delete_output(self, output_id: str) -> None:
        output = self.state.find_output(output_id)
        if output is None:
            self._missing("output", output_id)
            return
        self.state.outputs.remove(output)
        if self.state.selected_output_id == output_id:
            self.state.selected_output_id = None
        self._mark_dirty()

    # --- Selection and hit testing ---

    def select_gear(self, gear_id: Optional[str]) -> None:
        self.state.selected_gear_id = gear_id if self.state.find_gear(gear_id) else None
        self.state.selected_output_id = None

    def select_output(self, output_id: Optional[str]) -> None:
        self.state.selected_output_id = output_id if self.state.find_output(output_id) else None
        self.state.selected_gear_id = None

    def deselect(self) -> None:
        self.state.selected_gear_id = None
        self.state.selected_output_id = None

    def hit_test_gear(self, x: float, y: float) -> Optional[Gear]:
        """Top-most gear under a point (last placed wins)."""
        for gear in reversed(self.state.gears):
            if distance(x, y, gear.x, gear.y) <= gear.radius + GEAR_HIT_MARGIN:
                return gear
        return None

    def hit_test_output(self, x: float, y: float) -> Optional[Output]:
        for output in reversed(self.state.outputs):
            if distance(x, y, output.x, output.y) <= output.hit_radius:
                return output
        return None

    # --- Animation ---

    def tick(self, dt: float) -> LoadResult:
        """Advance one animation frame of ``dt`` seconds.

        Order matters: load, then driver rotation, then the rest of the
        train, then outputs.
        """
        state = self.state
        load = estimate_load(state)
        state.load_percentage = load.percentage

        if state.is_playing:
            driver = state.driver
            if driver is not None and not load.locked:
                driver.rotation_speed = state.settings.driver_speed * load.multiplier
                driver.rotation += driver.rotation_speed * dt * TWO_PI
                synchronize_rotations(state, driver)
            mirror_outputs(state)

        return load

    def spin_driver(self, delta: float) -> None:
        """Turn the driver by hand while stopped; the train follows."""
        state = self.state
        driver = state.driver
        if driver is None or state.locked or state.is_playing:
            return
        driver.rotation += delta
        synchronize_rotations(state, driver)
        mirror_outputs(state)

    def toggle_play(self) -> bool:
        """Start or stop playback; returns the new playing flag.

        Starting with no driver makes the first gear the driver.
        """
        state = self.state
        state.is_playing = not state.is_playing
        if state.is_playing and state.driver_gear_id is None and state.gears:
            self.set_driver_gear(state.gears[0].id)
        return state.is_playing

    def toggle_direction(self) -> int:
        settings = self.state.settings
        settings.spin_direction = -settings.spin_direction
        if self.state.driver_gear_id:
            propagate_speeds(self.state)
        self._mark_dirty()
        return settings.spin_direction

    def set_spin_speed(self, speed: float) -> None:
        self.state.settings.spin_speed = speed
        if self.state.driver_gear_id:
            propagate_speeds(self.state)
        self._mark_dirty()

    def reset_rotations(self) -> None:
        for gear in self.state.gears:
            gear.rotation = 0.0
        for output in self.state.outputs:
            output.rotation = 0.0

    def clear_all(self) -> None:
        state = self.state
        state.gears = []
        state.outputs = []
        state.driver_gear_id = None
        state.locked = False
        state.locked_gear_ids = set()
        state.load_percentage = 0.0
        self.deselect()
        self._mark_dirty()

    # --- Read surface ---

    def status(self) -> SystemStatus:
        return self.state.status()

    def gear_ratio(self, gear_id: str) -> Optional[float]:
        """Driver teeth over this gear's teeth; None for the driver itself."""
        driver = self.state.driver
        gear = self.state.find_gear(gear_id)
        if driver is None or gear is None or gear.id == driver.id:
            return None
        return driver.teeth_count / gear.teeth_count
