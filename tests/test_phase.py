"""Tests for phase offset resolution."""

import math

import pytest

from geartrain.models import Gear, SimulationState
from geartrain.physics.geometry import angular_pitch, normalize_angle
from geartrain.physics.meshing import rebuild_adjacency
from geartrain.physics.phase import mesh_phase_offset, resolve_phase_offsets
from geartrain.physics.sync import synchronize_rotations


def _same_angle(a, b):
    return abs(normalize_angle(a - b)) < 1e-9


class TestMeshPhaseOffset:
    """Tests for the pairwise contact formula."""

    def test_child_to_the_right(self):
        parent = Gear(x=0, y=0, teeth_count=24)
        child = Gear(x=90, y=0, teeth_count=12)
        # contact 0: offset = pi - pitch/2 = pi - pi/12
        assert mesh_phase_offset(parent, child) == pytest.approx(11 * math.pi / 12)

    def test_child_above(self):
        parent = Gear(x=0, y=0, teeth_count=24)
        child = Gear(x=0, y=90, teeth_count=12)
        # 3pi/2 - pi/12 + (pi/2) * 2, wrapped
        assert mesh_phase_offset(parent, child) == pytest.approx(5 * math.pi / 12)

    def test_result_normalized(self):
        parent = Gear(x=0, y=0, teeth_count=48)
        for angle in (0.3, 1.9, -2.4, 3.0):
            child = Gear(x=150 * math.cos(angle), y=150 * math.sin(angle), teeth_count=12)
            offset = mesh_phase_offset(parent, child)
            assert -math.pi < offset <= math.pi


class TestResolvePhaseOffsets:
    """Tests for breadth-first phase assignment."""

    @pytest.fixture
    def state(self):
        gears = [
            Gear(x=0, y=0, teeth_count=24, id="driver", phase_offset=0.8),
            Gear(x=90, y=0, teeth_count=12, id="pinion"),
            Gear(x=160, y=0, teeth_count=16, id="idler"),
            Gear(x=900, y=900, teeth_count=12, id="loose", phase_offset=1.23),
        ]
        state = SimulationState(gears=gears)
        rebuild_adjacency(state)
        return state

    def test_no_driver_is_noop(self, state):
        resolve_phase_offsets(state)
        assert state.find_gear("driver").phase_offset == 0.8
        assert state.find_gear("pinion").phase_offset == 0.0

    def test_driver_phase_reset(self, state):
        state.driver_gear_id = "driver"
        resolve_phase_offsets(state)
        assert state.find_gear("driver").phase_offset == 0.0

    def test_each_child_phased_against_parent(self, state):
        state.driver_gear_id = "driver"
        resolve_phase_offsets(state)

        driver, pinion, idler = (state.find_gear(i) for i in ("driver", "pinion", "idler"))
        assert pinion.phase_offset == pytest.approx(mesh_phase_offset(driver, pinion))
        assert idler.phase_offset == pytest.approx(mesh_phase_offset(pinion, idler))

    def test_unreachable_gear_keeps_stale_phase(self, state):
        state.driver_gear_id = "driver"
        resolve_phase_offsets(state)
        assert state.find_gear("loose").phase_offset == 1.23

    def test_first_edge_wins_in_a_loop(self):
        gears = [
            Gear(x=0, y=0, teeth_count=12, id="a"),
            Gear(x=60, y=0, teeth_count=12, id="b"),
            Gear(x=30, y=54.83, teeth_count=13, id="c"),
        ]
        state = SimulationState(gears=gears, driver_gear_id="a")
        rebuild_adjacency(state)

        a, b, c = gears
        assert c.phase_offset == pytest.approx(mesh_phase_offset(a, c))


class TestInterlocking:
    """Teeth meet valleys along the line of centres as the driver turns."""

    @pytest.fixture
    def pair(self):
        driver = Gear(x=0, y=0, teeth_count=24, id="driver")
        pinion = Gear(x=90, y=0, teeth_count=12, id="pinion")
        state = SimulationState(gears=[driver, pinion], driver_gear_id="driver")
        rebuild_adjacency(state)
        return state, driver, pinion

    @pytest.mark.parametrize("driver_teeth_turned", [0, 1, 5])
    def test_valley_at_contact(self, pair, driver_teeth_turned):
        state, driver, pinion = pair
        driver.rotation = driver_teeth_turned * angular_pitch(driver)
        synchronize_rotations(state, driver)

        # A driver tooth points along +x; the pinion shows a valley along -x
        driver_tooth = driver.rotation - driver_teeth_turned * angular_pitch(driver)
        assert _same_angle(driver_tooth, 0.0)
        valleys = [pinion.rotation + (i + 0.5) * angular_pitch(pinion) for i in range(12)]
        assert any(_same_angle(v, math.pi) for v in valleys)
