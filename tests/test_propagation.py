"""Tests for speed propagation and lock detection."""

import pytest

from geartrain.models import Gear, SimulationState
from geartrain.physics.meshing import rebuild_adjacency
from geartrain.physics.propagation import propagate_speeds, speeds_conflict


def _train(*gears, driver=None, **settings):
    state = SimulationState(gears=list(gears))
    if settings:
        state.settings = state.settings.model_copy(update=settings)
    rebuild_adjacency(state)
    state.driver_gear_id = driver
    return state


class TestTwoGearChain:
    """Tests for a simple driver/pinion pair."""

    @pytest.fixture
    def state(self):
        return _train(
            Gear(x=0, y=0, teeth_count=24, id="driver"),
            Gear(x=90, y=0, teeth_count=12, id="pinion"),
            driver="driver",
        )

    def test_driver_speed(self, state):
        propagate_speeds(state)
        assert state.find_gear("driver").rotation_speed == pytest.approx(0.15)

    def test_smaller_gear_twice_as_fast_opposite_way(self, state):
        propagate_speeds(state)
        driver = state.find_gear("driver")
        pinion = state.find_gear("pinion")
        assert pinion.rotation_speed == pytest.approx(-2 * driver.rotation_speed)

    def test_result_speeds(self, state):
        result = propagate_speeds(state)
        assert result.speeds == pytest.approx({"driver": 0.15, "pinion": -0.3})
        assert not result.locked

    def test_direction_and_speed_settings(self):
        state = _train(
            Gear(x=0, y=0, teeth_count=24, id="driver"),
            Gear(x=90, y=0, teeth_count=12, id="pinion"),
            driver="driver",
            spin_speed=2.0,
            spin_direction=-1,
        )
        propagate_speeds(state)
        assert state.find_gear("driver").rotation_speed == pytest.approx(-0.3)
        assert state.find_gear("pinion").rotation_speed == pytest.approx(0.6)


class TestLongerTrains:
    """Tests for chains, even loops and disconnected gears."""

    def test_three_gear_chain(self):
        state = _train(
            Gear(x=0, y=0, teeth_count=24, id="driver"),
            Gear(x=90, y=0, teeth_count=12, id="pinion"),
            Gear(x=160, y=0, teeth_count=16, id="idler"),
            driver="driver",
        )
        propagate_speeds(state)
        # -(-0.3) * 12 / 16
        assert state.find_gear("idler").rotation_speed == pytest.approx(0.225)

    def test_even_loop_turns(self):
        # Four equal gears on a square: every loop edge agrees
        state = _train(
            Gear(x=0, y=0, teeth_count=12, id="a"),
            Gear(x=60, y=0, teeth_count=12, id="b"),
            Gear(x=60, y=60, teeth_count=12, id="c"),
            Gear(x=0, y=60, teeth_count=12, id="d"),
            driver="a",
        )
        result = propagate_speeds(state)
        assert not result.locked
        assert not state.locked
        assert state.find_gear("c").rotation_speed == pytest.approx(0.15)
        assert state.find_gear("d").rotation_speed == pytest.approx(-0.15)

    def test_disconnected_gear_stays_still(self):
        state = _train(
            Gear(x=0, y=0, teeth_count=24, id="driver"),
            Gear(x=500, y=500, teeth_count=12, id="loose", rotation_speed=0.7),
            driver="driver",
        )
        propagate_speeds(state)
        assert state.find_gear("loose").rotation_speed == 0.0


class TestLock:
    """Tests for kinematic conflict detection."""

    @pytest.fixture
    def triangle(self):
        return _train(
            Gear(x=0, y=0, teeth_count=12, id="a"),
            Gear(x=60, y=0, teeth_count=12, id="b"),
            Gear(x=30, y=54.83, teeth_count=13, id="c"),
            driver="a",
        )

    def test_triangle_is_meshed(self, triangle):
        assert triangle.find_gear("a").meshing_with == {"b", "c"}
        assert triangle.find_gear("b").meshing_with == {"a", "c"}

    def test_triangle_locks(self, triangle):
        result = propagate_speeds(triangle)
        assert result.locked
        assert triangle.locked

    def test_lock_zeroes_every_speed(self, triangle):
        propagate_speeds(triangle)
        for gear in triangle.gears:
            assert gear.rotation_speed == 0.0

    def test_locked_gears_are_the_conflicting_edge(self, triangle):
        propagate_speeds(triangle)
        assert triangle.locked_gear_ids == {"b", "c"}

    def test_lock_clears_when_loop_broken(self, triangle):
        propagate_speeds(triangle)
        assert triangle.locked

        triangle.find_gear("c").set_center(30, 300)
        rebuild_adjacency(triangle)

        assert not triangle.locked
        assert triangle.locked_gear_ids == set()
        assert triangle.find_gear("b").rotation_speed == pytest.approx(-0.15)


class TestNoDriver:
    """Tests for propagation with no driver."""

    def test_all_speeds_zeroed(self):
        state = _train(
            Gear(x=0, y=0, teeth_count=24, id="a", rotation_speed=0.15),
            Gear(x=90, y=0, teeth_count=12, id="b", rotation_speed=-0.3),
        )
        state.locked = True
        result = propagate_speeds(state)

        assert result.speeds == {}
        assert not state.locked
        assert all(g.rotation_speed == 0.0 for g in state.gears)


class TestSpeedsConflict:
    """Tests for the conflict tolerance."""

    def test_within_one_percent(self):
        assert not speeds_conflict(1.0, 1.005)

    def test_beyond_one_percent(self):
        assert speeds_conflict(1.0, 1.02)

    def test_opposite_sign(self):
        assert speeds_conflict(0.15, -0.15)

    def test_absolute_floor_near_zero(self):
        assert not speeds_conflict(0.0, 0.00005)
        assert speeds_conflict(0.0, 0.001)
