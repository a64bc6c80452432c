"""
Tests for the simulation engine.

Tests cover:
- Vehicle spawn/removal and the default pose fallback
- Tick pipeline order (ballast before kinematics, collection before steering)
- A full dive: flood, sink, blow, surface
- Sonar, collection and bubbles through the pipeline
- Event logging and callbacks
- Snapshots and run()
"""

import pytest

from subsim.ballast import BallastState
from subsim.config import SimulationConfig
from subsim.controls import ControlCommands
from subsim.kinematics import KinematicsConfig
from subsim.physics import Vector3D, VehiclePose
from subsim.simulation import (
    SimulationEvent,
    SimulationEventType,
    SimulationSnapshot,
    SubmarineSimulation,
)
from subsim.steering import SteeringState, Wanderer


DT = 1.0 / 60.0


@pytest.fixture
def sim():
    return SubmarineSimulation(SimulationConfig(seed=0))


def press(*keys):
    return ControlCommands.from_keys(pressed=keys)


def run_for(sim, seconds, commands=None):
    for _ in range(int(round(seconds / DT))):
        sim.step(commands, DT)


def dive(sim, seconds=5.0):
    sim.step(press("q"), DT)
    run_for(sim, seconds)


class TestVehicleLifecycle:
    """Tests for vehicle spawn and removal."""

    def test_vehicle_spawned_at_origin(self, sim):
        assert sim.vehicle is not None
        assert sim.vehicle.position == Vector3D.zero()
        assert sim.events_of_type(SimulationEventType.VEHICLE_SPAWNED)

    def test_no_vehicle_option(self):
        sim = SubmarineSimulation(spawn_vehicle=False)
        assert sim.vehicle is None
        assert sim.vehicle_pose() == VehiclePose.default()

    def test_remove_vehicle(self, sim):
        sim.remove_vehicle()
        assert sim.vehicle is None
        assert sim.events_of_type(SimulationEventType.VEHICLE_REMOVED)

    def test_tick_without_vehicle(self, sim):
        sim.add_wanderer(Wanderer("fish_0", Vector3D(0, -1, -5)))
        sim.remove_vehicle()
        observer_before = sim.observer.position.copy()
        sim.step(press("q"), DT)

        snapshot = sim.get_snapshot()
        assert snapshot.has_vehicle is False
        assert snapshot.pose.position == Vector3D.zero()
        assert snapshot.detections == []
        assert sim.observer.position == observer_before
        # Ballast still runs
        assert sim.ballast.vents_open is True
        assert "fish_0" in sim.wanderers


class TestPipeline:
    """Tests for the per-tick stage order."""

    def test_toggle_reported_by_step(self, sim):
        events = sim.step(press("q"), DT)
        assert [e.event_type for e in events] == [SimulationEventType.VENTS_OPENED]
        assert sim.ballast.vents_open is True

    def test_kinematics_reads_fill_written_this_tick(self, sim):
        sim.ballast = BallastState(fill_level=1.0 / 3.0 - 0.001)
        sim.ballast_controller.config.fill_rate = 1.0
        sim.step(press("q"), 0.1)
        # Fill passed neutral during ballast, so the vehicle sank on the same tick
        assert sim.vehicle.position.y < 0.0

    def test_ballast_reads_depth_at_tick_start(self, sim):
        sim.vehicle.position = Vector3D(0.0, -5.0, 0.0)
        sim.ballast.compressor_on = True
        events = sim.step(None, DT)
        assert sim.ballast.compressor_on is False
        assert SimulationEventType.COMPRESSOR_FORCED_OFF in [e.event_type for e in events]

    def test_collection_happens_before_steering(self, sim):
        fish = Wanderer("fish_0", Vector3D(1.9, 0.0, 0.0), SteeringState(
            direction=Vector3D(1, 0, 0), speed=100.0
        ))
        sim.add_wanderer(fish)
        events = sim.step(None, 0.1)
        assert "fish_0" not in sim.wanderers
        assert sim.vitals.score == 10
        assert SimulationEventType.ENTITY_COLLECTED in [e.event_type for e in events]

    def test_step_advances_time(self, sim):
        sim.step(None, 0.25)
        sim.step(None)
        assert sim.current_time == pytest.approx(0.25 + sim.config.time_step)

    def test_negative_dt_clamped(self, sim):
        sim.step(None, -1.0)
        assert sim.current_time == 0.0

    def test_non_positive_configured_step_clamped(self, sim):
        sim.config.time_step = -0.5
        sim.step(None)
        assert sim.current_time == 0.0


class TestDive:
    """End-to-end dive through the pipeline."""

    def test_flooding_sinks_vehicle(self, sim):
        dive(sim)
        assert sim.ballast.fill_level == 1.0
        assert sim.kinematics.depth(sim.vehicle) > 1.0
        assert sim.events_of_type(SimulationEventType.SUBMERGED)
        assert sim.events_of_type(SimulationEventType.TANKS_FULL)

    def test_vehicle_never_above_surface(self, sim):
        sim.step(press("q"), DT)
        for i in range(900):
            commands = ControlCommands.from_keys(held=["w", "a"])
            if i == 400:
                commands = ControlCommands.from_keys(held=["w"], pressed=["e"])
            sim.step(commands, DT)
            assert sim.vehicle.position.y <= 0.0

    def test_blowing_tanks_surfaces(self, sim):
        dive(sim)
        sim.step(press("e"), DT)
        run_for(sim, 20.0)
        assert sim.ballast.fill_level == 0.0
        assert sim.ballast.air_valve_open is False
        assert sim.vehicle.position.y == 0.0
        assert sim.events_of_type(SimulationEventType.SURFACED)
        assert sim.events_of_type(SimulationEventType.AIR_VALVE_AUTO_CLOSED)

    def test_compressor_recharges_air_at_surface(self, sim):
        sim.ballast.compressed_air = 0.5
        sim.step(press("r"), DT)
        run_for(sim, 1.0)
        assert sim.ballast.compressor_on is True
        assert sim.ballast.compressed_air > 0.5
        assert sim.ballast.electricity < 100.0

    def test_bubbles_while_flooding_submerged(self, sim):
        dive(sim, seconds=2.5)
        snapshot = sim.get_snapshot()
        assert snapshot.depth > 0.0
        assert len(snapshot.bubbles) > 0

    def test_oxygen_drops_while_submerged(self, sim):
        dive(sim)
        assert sim.vitals.oxygen < 100.0


class TestSonarThroughPipeline:
    """Sonar detections produced by the simulation."""

    def test_detects_fish_ahead(self, sim):
        sim.add_wanderer(Wanderer("fish_0", Vector3D(0.0, -1.0, -10.0)))
        events = sim.step(None, DT)
        assert [d.entity_id for d in sim.sonar.detections] == ["fish_0"]
        assert SimulationEventType.CONTACT_COUNT_CHANGED in [e.event_type for e in events]

    def test_school_partially_in_range(self, sim):
        sim.spawn_school()
        assert len(sim.wanderers) == 20
        sim.step(None, DT)
        count = len(sim.sonar.detections)
        assert 0 < count < 20
        assert len(sim.get_snapshot().blips) == min(count, 10)


class TestEvents:
    """Tests for event logging."""

    def test_event_str(self):
        event = SimulationEvent(SimulationEventType.VENTS_OPENED, 1.25, "sub")
        assert str(event) == "T+1.2s [sub] VENTS_OPENED"

    def test_callback_receives_events(self, sim):
        received = []
        sim.add_event_callback(received.append)
        sim.step(press("q"), DT)
        assert [e.event_type for e in received] == [SimulationEventType.VENTS_OPENED]

        sim.remove_event_callback(received.append)
        sim.step(press("q"), DT)
        assert len(received) == 1

    def test_failing_callback_does_not_stop_simulation(self, sim, capsys):
        def broken(event):
            raise RuntimeError("boom")

        sim.add_event_callback(broken)
        sim.step(press("q"), DT)
        assert sim.ballast.vents_open is True
        assert "Event callback error: boom" in capsys.readouterr().out


class TestRun:
    """Tests for run() and snapshots."""

    def test_run_duration(self, sim):
        sim.run(1.0)
        assert sim.current_time >= 1.0
        assert sim.current_time < 1.0 + sim.config.time_step + 1e-9
        assert sim.events_of_type(SimulationEventType.SIMULATION_STARTED)
        assert sim.events_of_type(SimulationEventType.SIMULATION_ENDED)

    @pytest.mark.parametrize("time_step", [0.0, -0.1])
    def test_run_rejects_non_positive_step(self, sim, time_step):
        sim.config.time_step = time_step
        with pytest.raises(ValueError):
            sim.run(1.0)
        assert sim.current_time == 0.0

    def test_run_with_command_source(self, sim):
        sim.run(0.5, lambda t: press("q") if t == 0.0 else ControlCommands())
        assert sim.ballast.vents_open is True
        assert sim.ballast.fill_level > 0.0

    def test_stop_from_callback(self, sim):
        def stop_on_open(event):
            if event.event_type == SimulationEventType.VENTS_OPENED:
                sim.stop()

        sim.add_event_callback(stop_on_open)
        sim.run(10.0, lambda t: press("q"))
        assert sim.current_time < 0.1

    def test_snapshot_contents(self, sim):
        sim.spawn_school()
        sim.step(None, DT)
        snapshot = sim.get_snapshot()
        assert isinstance(snapshot, SimulationSnapshot)
        assert snapshot.has_vehicle is True
        assert snapshot.entity_count == 20
        assert len(snapshot.sweep_line) == 20

        data = snapshot.to_dict()
        for key in ("position", "depth", "yaw", "ballast", "sweep_angle",
                    "detections", "blips", "observer_position", "score",
                    "oxygen", "health", "bubbles", "entity_count"):
            assert key in data
        assert data["ballast"]["vents"] == "CLOSED"

    def test_snapshot_is_a_copy(self, sim):
        snapshot = sim.get_snapshot()
        sim.vehicle.position = Vector3D(5.0, -5.0, 5.0)
        sim.ballast.fill_level = 0.7
        assert snapshot.pose.position == Vector3D.zero()
        assert snapshot.ballast.fill_level == 0.0

    def test_snapshot_bubbles_are_copies(self, sim):
        dive(sim, seconds=2.5)
        snapshot = sim.get_snapshot()
        assert snapshot.bubbles
        ages = [b.age for b in snapshot.bubbles]
        run_for(sim, 0.1)
        assert [b.age for b in snapshot.bubbles] == ages

    def test_bubbles_use_configured_surface(self):
        config = SimulationConfig(seed=0, vehicle=KinematicsConfig(surface_y=-3.0))
        sim = SubmarineSimulation(config)
        assert sim.bubbles.surface_y == -3.0

    def test_get_status(self, sim):
        status = sim.get_status()
        assert status["has_vehicle"] is True
        assert status["score"] == 0
