"""
Tests for the ballast and power module.

Tests cover:
- Vent / air valve mutual exclusion
- Tank filling and blowing, including the automatic air valve close
- Compressor behaviour at and below the surface
- Electricity drain and recharge
- Resource bounds over long random runs
- Fill / blow time helpers
"""

import numpy as np
import pytest

from subsim.ballast import (
    AIR_PER_DRAIN,
    BALLAST_DRAIN_RATE,
    BALLAST_FILL_RATE,
    COMPRESSED_AIR_RATE,
    COMPRESSOR_POWER_DRAIN,
    MAX_ELECTRICITY,
    POWER_RECHARGE_RATE,
    BallastConfig,
    BallastController,
    BallastState,
    BallastTransition,
    time_to_blow,
    time_to_fill,
)


@pytest.fixture
def controller():
    return BallastController()


@pytest.fixture
def state():
    return BallastState()


class TestBallastState:
    """Tests for BallastState."""

    def test_defaults(self, state):
        assert state.fill_level == 0.0
        assert state.vents_open is False
        assert state.air_valve_open is False
        assert state.compressed_air == 1.0
        assert state.compressor_on is False
        assert state.electricity == MAX_ELECTRICITY

    def test_status_strings(self, state):
        status = state.get_status()
        assert status["vents"] == "CLOSED"
        assert status["air_valve"] == "CLOSED"
        assert status["compressor"] == "OFF"
        assert status["air_percent"] == 100.0
        assert status["electricity_percent"] == 100.0

        state.vents_open = True
        state.compressor_on = True
        assert state.get_status()["vents"] == "OPEN"
        assert state.get_status()["compressor"] == "ON"

    def test_copy_is_independent(self, state):
        clone = state.copy()
        clone.fill_level = 0.5
        assert state.fill_level == 0.0


class TestToggles:
    """Tests for the valve toggles."""

    def test_open_vents(self, controller, state):
        transitions = controller.update(state, depth=0.0, dt=0.0, toggle_vents=True)
        assert state.vents_open is True
        assert BallastTransition.VENTS_OPENED in transitions

    def test_opening_vents_closes_air_valve(self, controller, state):
        state.air_valve_open = True
        state.fill_level = 0.5
        transitions = controller.update(state, depth=0.0, dt=0.0, toggle_vents=True)
        assert state.vents_open is True
        assert state.air_valve_open is False
        assert BallastTransition.AIR_VALVE_CLOSED in transitions

    def test_opening_air_valve_closes_vents(self, controller, state):
        state.vents_open = True
        controller.update(state, depth=0.0, dt=0.0, toggle_air_valve=True)
        assert state.air_valve_open is True
        assert state.vents_open is False

    def test_vents_toggle_twice_closes(self, controller, state):
        controller.update(state, depth=0.0, dt=0.0, toggle_vents=True)
        transitions = controller.update(state, depth=0.0, dt=0.0, toggle_vents=True)
        assert state.vents_open is False
        assert transitions == [BallastTransition.VENTS_CLOSED]

    def test_never_both_open(self, controller):
        rng = np.random.default_rng(1)
        state = BallastState(fill_level=0.5)
        for _ in range(500):
            vents, valve = rng.integers(0, 2, size=2)
            controller.update(
                state, depth=1.0, dt=0.01,
                toggle_vents=bool(vents), toggle_air_valve=bool(valve)
            )
            assert not (state.vents_open and state.air_valve_open)

    def test_compressor_toggles_at_surface(self, controller, state):
        transitions = controller.update(state, depth=0.0, dt=0.0, toggle_compressor=True)
        assert state.compressor_on is True
        assert BallastTransition.COMPRESSOR_STARTED in transitions

        controller.update(state, depth=0.0, dt=0.0, toggle_compressor=True)
        assert state.compressor_on is False

    def test_compressor_cannot_start_submerged(self, controller, state):
        transitions = controller.update(state, depth=3.0, dt=0.1, toggle_compressor=True)
        assert state.compressor_on is False
        assert BallastTransition.COMPRESSOR_STARTED not in transitions


class TestTankTransfer:
    """Tests for filling and blowing the tanks."""

    def test_vents_fill_tanks(self, controller):
        state = BallastState(vents_open=True)
        controller.update(state, depth=2.0, dt=1.0)
        assert state.fill_level == pytest.approx(BALLAST_FILL_RATE)

    def test_fill_clamped_at_full(self, controller):
        state = BallastState(vents_open=True, fill_level=0.95)
        transitions = controller.update(state, depth=2.0, dt=1.0)
        assert state.fill_level == 1.0
        assert BallastTransition.TANKS_FULL in transitions

    def test_air_valve_blows_tanks(self, controller):
        state = BallastState(fill_level=1.0, air_valve_open=True)
        controller.update(state, depth=2.0, dt=1.0)
        assert state.fill_level == pytest.approx(1.0 - BALLAST_DRAIN_RATE)
        assert state.compressed_air == pytest.approx(1.0 - BALLAST_DRAIN_RATE * AIR_PER_DRAIN)

    def test_air_valve_auto_closes_when_empty(self, controller):
        state = BallastState(fill_level=0.1, air_valve_open=True)
        transitions = controller.update(state, depth=2.0, dt=1.0)
        assert state.fill_level == 0.0
        assert state.air_valve_open is False
        assert BallastTransition.AIR_VALVE_AUTO_CLOSED in transitions
        assert BallastTransition.TANKS_EMPTY in transitions

    def test_no_air_means_no_blow(self, controller):
        state = BallastState(fill_level=0.5, air_valve_open=True, compressed_air=0.0)
        controller.update(state, depth=2.0, dt=1.0)
        assert state.fill_level == 0.5
        assert state.air_valve_open is True

    def test_air_exhausted_transition(self, controller):
        state = BallastState(fill_level=1.0, air_valve_open=True, compressed_air=0.1)
        transitions = controller.update(state, depth=2.0, dt=1.0)
        assert state.compressed_air == 0.0
        assert BallastTransition.AIR_EXHAUSTED in transitions

    def test_zero_dt_changes_nothing_but_toggles(self, controller):
        state = BallastState(fill_level=0.4, vents_open=True, electricity=50.0)
        controller.update(state, depth=0.0, dt=0.0)
        assert state.fill_level == 0.4
        assert state.electricity == 50.0

    def test_negative_dt_treated_as_zero(self, controller):
        state = BallastState(fill_level=0.4, vents_open=True)
        controller.update(state, depth=0.0, dt=-5.0)
        assert state.fill_level == 0.4


class TestCompressorAndPower:
    """Tests for the compressor and electricity."""

    def test_compressor_generates_air_at_surface(self, controller):
        state = BallastState(compressed_air=0.5, compressor_on=True)
        controller.update(state, depth=0.0, dt=1.0)
        assert state.compressed_air == pytest.approx(0.5 + COMPRESSED_AIR_RATE)
        assert state.electricity == pytest.approx(MAX_ELECTRICITY - COMPRESSOR_POWER_DRAIN)

    def test_compressor_forced_off_when_submerged(self, controller):
        state = BallastState(compressed_air=0.5, compressor_on=True, electricity=50.0)
        transitions = controller.update(state, depth=1.0, dt=1.0)
        assert state.compressor_on is False
        assert state.compressed_air == 0.5
        assert BallastTransition.COMPRESSOR_FORCED_OFF in transitions
        # Off by the recharge step, so the tick already recharges
        assert state.electricity == pytest.approx(50.0 + POWER_RECHARGE_RATE)

    def test_no_air_without_electricity(self, controller):
        state = BallastState(compressed_air=0.5, compressor_on=True, electricity=0.0)
        controller.update(state, depth=0.0, dt=1.0)
        assert state.compressed_air == 0.5
        assert state.electricity == 0.0

    def test_electricity_depleted_transition(self, controller):
        state = BallastState(compressed_air=0.5, compressor_on=True, electricity=0.2)
        transitions = controller.update(state, depth=0.0, dt=1.0)
        assert state.electricity == 0.0
        assert BallastTransition.ELECTRICITY_DEPLETED in transitions

    def test_idle_recharges(self, controller):
        state = BallastState(electricity=50.0)
        controller.update(state, depth=5.0, dt=10.0)
        assert state.electricity == pytest.approx(50.0 + 10.0 * POWER_RECHARGE_RATE)

    def test_recharge_capped(self, controller, state):
        controller.update(state, depth=0.0, dt=100.0)
        assert state.electricity == MAX_ELECTRICITY

    def test_full_air_stays_full(self, controller):
        state = BallastState(compressor_on=True)
        controller.update(state, depth=0.0, dt=1.0)
        assert state.compressed_air == 1.0


class TestResourceBounds:
    """All resources stay within their ranges over long random runs."""

    def test_random_run_stays_in_bounds(self, controller):
        rng = np.random.default_rng(42)
        state = BallastState()
        for _ in range(3000):
            toggles = rng.random(3) < 0.05
            controller.update(
                state,
                depth=float(rng.uniform(-1.0, 10.0)),
                dt=float(rng.uniform(0.0, 0.5)),
                toggle_vents=bool(toggles[0]),
                toggle_air_valve=bool(toggles[1]),
                toggle_compressor=bool(toggles[2]),
            )
            assert 0.0 <= state.fill_level <= 1.0
            assert 0.0 <= state.compressed_air <= 1.0
            assert 0.0 <= state.electricity <= MAX_ELECTRICITY


class TestConfigAndHelpers:
    """Tests for BallastConfig and the timing helpers."""

    def test_negative_rate_raises(self):
        with pytest.raises(ValueError):
            BallastConfig(fill_rate=-0.1)

    def test_from_config_data_partial(self):
        config = BallastConfig.from_config_data({"fill_rate": 0.5})
        assert config.fill_rate == 0.5
        assert config.drain_rate == BALLAST_DRAIN_RATE

    def test_custom_rates_used(self):
        controller = BallastController(BallastConfig(fill_rate=0.5))
        state = BallastState(vents_open=True)
        controller.update(state, depth=1.0, dt=1.0)
        assert state.fill_level == pytest.approx(0.5)

    def test_time_to_fill(self):
        assert time_to_fill(BallastState()) == pytest.approx(1.0 / BALLAST_FILL_RATE)
        assert time_to_fill(BallastState(fill_level=1.0)) == 0.0

    def test_time_to_blow(self):
        assert time_to_blow(BallastState(fill_level=1.0)) == pytest.approx(2.5)

    def test_time_to_blow_air_limited(self):
        state = BallastState(fill_level=1.0, compressed_air=0.4)
        assert time_to_blow(state) == float('inf')

    def test_time_to_fill_matches_simulation(self, controller):
        state = BallastState(vents_open=True)
        dt = 0.01
        steps = 0
        while state.fill_level < 1.0:
            controller.update(state, depth=1.0, dt=dt)
            steps += 1
        assert steps * dt == pytest.approx(time_to_fill(BallastState()), abs=dt)
