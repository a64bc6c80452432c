#!/usr/bin/env python3
"""
Simulation Engine for the Submarine Simulation Core.

This module runs the per-frame pipeline that:
- Applies operator commands to the ballast controller
- Integrates the vehicle's motion from thrust, drag and buoyancy
- Collects nearby fish and updates crew vitals
- Sweeps the sonar and rebuilds the detection list
- Moves every wanderer and the trailing observer
- Animates ballast bubbles and the sea surface

Each subsystem owns its own state and is its only writer; the step runs
them in a fixed order so later stages read what earlier stages wrote.

The simulation produces an event log for analysis and debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Tuple

from .ballast import BallastController, BallastState, BallastTransition
from .config import SimulationConfig
from .controls import ControlCommands
from .environment import Bubble, BubbleEmitter, WaveClock
from .kinematics import VehicleKinematics
from .observer import ObserverState, apply_camera_input, update_observer
from .physics import Vector3D, VehiclePose
from .sonar import Detection, SonarSystem
from .steering import Wanderer, spawn_school, update_school
from .vitals import VitalsState, collect_nearby, update_vitals


VEHICLE_ID = "sub"


# =============================================================================
# EVENT TYPES
# =============================================================================

class SimulationEventType(Enum):
    """Types of events that can occur during simulation."""
    # Ballast events
    VENTS_OPENED = auto()
    VENTS_CLOSED = auto()
    AIR_VALVE_OPENED = auto()
    AIR_VALVE_CLOSED = auto()
    AIR_VALVE_AUTO_CLOSED = auto()
    COMPRESSOR_STARTED = auto()
    COMPRESSOR_STOPPED = auto()
    COMPRESSOR_FORCED_OFF = auto()
    TANKS_FULL = auto()
    TANKS_EMPTY = auto()
    AIR_EXHAUSTED = auto()
    ELECTRICITY_DEPLETED = auto()

    # Vehicle events
    VEHICLE_SPAWNED = auto()
    VEHICLE_REMOVED = auto()
    SUBMERGED = auto()
    SURFACED = auto()

    # Sonar events
    CONTACT_COUNT_CHANGED = auto()

    # Crew events
    ENTITY_COLLECTED = auto()
    OXYGEN_DEPLETED = auto()

    # Run events
    SIMULATION_STARTED = auto()
    SIMULATION_ENDED = auto()


_BALLAST_EVENTS = {
    BallastTransition.VENTS_OPENED: SimulationEventType.VENTS_OPENED,
    BallastTransition.VENTS_CLOSED: SimulationEventType.VENTS_CLOSED,
    BallastTransition.AIR_VALVE_OPENED: SimulationEventType.AIR_VALVE_OPENED,
    BallastTransition.AIR_VALVE_CLOSED: SimulationEventType.AIR_VALVE_CLOSED,
    BallastTransition.AIR_VALVE_AUTO_CLOSED: SimulationEventType.AIR_VALVE_AUTO_CLOSED,
    BallastTransition.COMPRESSOR_STARTED: SimulationEventType.COMPRESSOR_STARTED,
    BallastTransition.COMPRESSOR_STOPPED: SimulationEventType.COMPRESSOR_STOPPED,
    BallastTransition.COMPRESSOR_FORCED_OFF: SimulationEventType.COMPRESSOR_FORCED_OFF,
    BallastTransition.TANKS_FULL: SimulationEventType.TANKS_FULL,
    BallastTransition.TANKS_EMPTY: SimulationEventType.TANKS_EMPTY,
    BallastTransition.AIR_EXHAUSTED: SimulationEventType.AIR_EXHAUSTED,
    BallastTransition.ELECTRICITY_DEPLETED: SimulationEventType.ELECTRICITY_DEPLETED,
}


# =============================================================================
# SIMULATION EVENT
# =============================================================================

@dataclass
class SimulationEvent:
    """
    An event that occurs during simulation.

    Attributes:
        event_type: The type of event.
        timestamp: Simulation time when event occurred (seconds).
        entity_id: ID of the entity involved (if applicable).
        data: Additional event-specific data.
    """
    event_type: SimulationEventType
    timestamp: float
    entity_id: Optional[str] = None
    data: dict = field(default_factory=dict)

    def __str__(self) -> str:
        entity_str = f"[{self.entity_id}] " if self.entity_id else ""
        return f"T+{self.timestamp:.1f}s {entity_str}{self.event_type.name}"


# =============================================================================
# SNAPSHOT
# =============================================================================

@dataclass
class SimulationSnapshot:
    """
    Everything a renderer or HUD needs after a tick.

    Attributes:
        timestamp: Simulation time (seconds)
        has_vehicle: False when the pose fields are defaults
        pose: Vehicle pose (copy)
        depth: Vehicle depth
        yaw, pitch, roll: Vehicle orientation (radians)
        ballast: Ballast state (copy)
        sweep_angle: Sonar sweep angle
        sweep_line: Sweep line panel points
        detections: Full detection list
        blips: Detections the panel can show
        observer_position: Observer world position
        vitals: Crew vitals (copy)
        bubbles: Live bubbles
        entity_count: Live wanderers
    """
    timestamp: float
    has_vehicle: bool
    pose: VehiclePose
    depth: float
    yaw: float
    pitch: float
    roll: float
    ballast: BallastState
    sweep_angle: float
    sweep_line: List[Tuple[float, float]]
    detections: List[Detection]
    blips: List[Detection]
    observer_position: Vector3D
    vitals: VitalsState
    bubbles: List[Bubble]
    entity_count: int

    @property
    def speed(self) -> float:
        return self.pose.speed

    def to_dict(self) -> dict:
        """Plain-data view for logging or a UI bridge."""
        return {
            "timestamp": self.timestamp,
            "has_vehicle": self.has_vehicle,
            "position": self.pose.position.to_tuple(),
            "velocity": self.pose.velocity.to_tuple(),
            "speed": self.speed,
            "depth": self.depth,
            "yaw": self.yaw,
            "pitch": self.pitch,
            "roll": self.roll,
            "ballast": self.ballast.get_status(),
            "sweep_angle": self.sweep_angle,
            "detections": [d.as_record() for d in self.detections],
            "blips": [d.as_record() for d in self.blips],
            "observer_position": self.observer_position.to_tuple(),
            "score": self.vitals.score,
            "health": self.vitals.health,
            "oxygen": self.vitals.oxygen,
            "bubbles": len(self.bubbles),
            "entity_count": self.entity_count,
        }


# =============================================================================
# SIMULATION
# =============================================================================

class SubmarineSimulation:
    """
    Main simulation engine.

    This class manages the complete tick pipeline:
    - Ballast controller
    - Vehicle kinematics
    - Collection and vitals
    - Sonar sweep and detection
    - Wanderer steering
    - Observer tracking
    - Bubbles and waves
    - Event logging

    Usage:
        sim = SubmarineSimulation()
        sim.spawn_school()
        sim.step(ControlCommands(toggle_vents=True))
        snapshot = sim.get_snapshot()

    Attributes:
        config: Simulation configuration.
        current_time: Current simulation time.
        vehicle: Vehicle pose, or None if the vehicle is gone.
        ballast: Ballast state.
        sonar: Sonar sweep and detections.
        wanderers: Dict of entity_id to Wanderer.
        observer: Observer state.
        vitals: Crew vitals.
        bubbles: Bubble emitter.
        waves: Sea surface clock.
        events: List of simulation events.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        spawn_vehicle: bool = True,
        verbose: bool = False
    ) -> None:
        """
        Initialize the simulation.

        Args:
            config: Simulation configuration (defaults if omitted).
            spawn_vehicle: Start with a vehicle at the origin.
            verbose: Print events as they are logged.
        """
        self.config = config or SimulationConfig()
        self.verbose = verbose
        self.current_time: float = 0.0

        # Subsystems
        self.ballast_controller = BallastController(self.config.ballast)
        self.kinematics = VehicleKinematics(self.config.vehicle)
        self.sonar = SonarSystem(self.config.sonar)

        # Owned state
        self.vehicle: Optional[VehiclePose] = None
        self.ballast = BallastState()
        self.wanderers: Dict[str, Wanderer] = {}
        self.observer = ObserverState()
        self.vitals = VitalsState()
        self.bubbles = BubbleEmitter.seeded(self.config.seed, self.config.vehicle.surface_y)
        self.waves = WaveClock()

        # Event log
        self.events: List[SimulationEvent] = []
        self._event_callbacks: List[Callable[[SimulationEvent], None]] = []

        self._running = False
        self._last_contact_count = 0

        if spawn_vehicle:
            self.spawn_vehicle()

    # -------------------------------------------------------------------------
    # Entity Management
    # -------------------------------------------------------------------------

    def spawn_vehicle(self, pose: Optional[VehiclePose] = None) -> VehiclePose:
        """Place the vehicle (at the origin by default)."""
        self.vehicle = pose or VehiclePose()
        self._log_event(SimulationEventType.VEHICLE_SPAWNED, VEHICLE_ID, data={
            'position': self.vehicle.position.to_tuple(),
        })
        return self.vehicle

    def remove_vehicle(self) -> Optional[VehiclePose]:
        """Remove the vehicle; dependent subsystems fall back to defaults."""
        pose = self.vehicle
        self.vehicle = None
        if pose is not None:
            self._log_event(SimulationEventType.VEHICLE_REMOVED, VEHICLE_ID)
        return pose

    def vehicle_pose(self) -> VehiclePose:
        """Vehicle pose, or a default zero pose if there is no vehicle."""
        if self.vehicle is None:
            return VehiclePose.default()
        return self.vehicle

    def add_wanderer(self, wanderer: Wanderer) -> None:
        self.wanderers[wanderer.entity_id] = wanderer

    def remove_wanderer(self, entity_id: str) -> Optional[Wanderer]:
        return self.wanderers.pop(entity_id, None)

    def spawn_school(self, count: Optional[int] = None) -> List[Wanderer]:
        """Spawn the configured school of wanderers."""
        if count is None:
            count = self.config.school_size
        school = spawn_school(count, speed=self.config.swim_speed)
        for wanderer in school:
            self.add_wanderer(wanderer)
        return school

    def entity_positions(self) -> List[Tuple[str, Vector3D]]:
        return [(w.entity_id, w.position) for w in self.wanderers.values()]

    # -------------------------------------------------------------------------
    # Main Loop
    # -------------------------------------------------------------------------

    def run(
        self,
        duration: float,
        command_source: Optional[Callable[[float], ControlCommands]] = None
    ) -> None:
        """
        Run the simulation for a specified duration.

        Args:
            duration: Total simulation time in seconds.
            command_source: Called with the current time before each tick
                to produce that tick's commands (idle if omitted).

        Raises:
            ValueError: If the configured time step is not positive.
        """
        if self.config.time_step <= 0:
            raise ValueError("Time step must be positive")

        self._running = True
        self._log_event(SimulationEventType.SIMULATION_STARTED)

        end_time = self.current_time + duration
        while self._running and self.current_time < end_time:
            commands = command_source(self.current_time) if command_source else None
            self.step(commands)

        self._log_event(SimulationEventType.SIMULATION_ENDED, data={
            'duration': self.current_time,
            'score': self.vitals.score,
            'entities_remaining': len(self.wanderers),
        })

    def stop(self) -> None:
        """Stop the simulation."""
        self._running = False

    def step(
        self,
        commands: Optional[ControlCommands] = None,
        dt: Optional[float] = None
    ) -> List[SimulationEvent]:
        """
        Execute a single simulation tick.

        Args:
            commands: Operator commands for this tick (idle if omitted).
            dt: Tick length in seconds (config time step if omitted).

        Returns:
            List of events that occurred during this tick.
        """
        commands = commands or ControlCommands()
        dt = max(0.0, self.config.time_step if dt is None else dt)
        first_event = len(self.events)

        # 1. Ballast reads the depth at tick start
        depth = self.kinematics.depth(self.vehicle) if self.vehicle else 0.0
        transitions = self.ballast_controller.update(
            self.ballast,
            depth=depth,
            dt=dt,
            toggle_vents=commands.toggle_vents,
            toggle_air_valve=commands.toggle_air_valve,
            toggle_compressor=commands.toggle_compressor,
        )
        for transition in transitions:
            self._log_event(_BALLAST_EVENTS[transition], VEHICLE_ID, data={
                'fill_level': self.ballast.fill_level,
                'compressed_air': self.ballast.compressed_air,
                'electricity': self.ballast.electricity,
            })

        # 2. Kinematics reads the fill level written above
        if self.vehicle is not None:
            self._update_vehicle(commands, depth, dt)

        # 3. Collection and vitals
        self._update_crew(dt)

        # 4. Sonar
        self.sonar.update(self.vehicle, self.entity_positions(), dt)
        contact_count = len(self.sonar.detections)
        if contact_count != self._last_contact_count:
            self._log_event(SimulationEventType.CONTACT_COUNT_CHANGED, VEHICLE_ID, data={
                'previous': self._last_contact_count,
                'current': contact_count,
            })
            self._last_contact_count = contact_count

        # 5. Wanderers and observer run independently
        update_school(self.wanderers, dt, self.config.steering)
        apply_camera_input(
            self.observer, commands.camera_yaw, commands.camera_pitch, dt, self.config.observer
        )
        update_observer(self.observer, self.vehicle, dt, self.config.observer)

        # 6. Environment
        position = self.vehicle.position if self.vehicle else None
        self.bubbles.update(self.ballast, position, dt)
        self.waves.advance(dt)

        self.current_time += dt
        return self.events[first_event:]

    # -------------------------------------------------------------------------
    # Stage Updates
    # -------------------------------------------------------------------------

    def _update_vehicle(self, commands: ControlCommands, depth_before: float, dt: float) -> None:
        """Integrate the vehicle and log surface crossings."""
        self.kinematics.update(self.vehicle, commands.movement, self.ballast.fill_level, dt)
        depth_after = self.kinematics.depth(self.vehicle)

        if depth_before <= 0.0 < depth_after:
            self._log_event(SimulationEventType.SUBMERGED, VEHICLE_ID, data={'depth': depth_after})
        elif depth_before > 0.0 >= depth_after:
            self._log_event(SimulationEventType.SURFACED, VEHICLE_ID)

    def _update_crew(self, dt: float) -> None:
        """Collect fish within reach and advance oxygen/health."""
        if self.vehicle is not None:
            collected = collect_nearby(self.vitals, self.vehicle.position, self.wanderers)
            for entity_id in collected:
                self._log_event(SimulationEventType.ENTITY_COLLECTED, entity_id, data={
                    'score': self.vitals.score,
                })

        had_oxygen = self.vitals.oxygen > 0.0
        depth = self.kinematics.depth(self.vehicle) if self.vehicle else 0.0
        update_vitals(self.vitals, depth, dt)
        if had_oxygen and self.vitals.oxygen <= 0.0:
            self._log_event(SimulationEventType.OXYGEN_DEPLETED, VEHICLE_ID)

    # -------------------------------------------------------------------------
    # Event Logging
    # -------------------------------------------------------------------------

    def add_event_callback(self, callback: Callable[[SimulationEvent], None]) -> None:
        """
        Register a callback to be called for each simulation event.

        Args:
            callback: Function that takes a SimulationEvent.
        """
        self._event_callbacks.append(callback)

    def remove_event_callback(self, callback: Callable[[SimulationEvent], None]) -> None:
        """Remove an event callback."""
        if callback in self._event_callbacks:
            self._event_callbacks.remove(callback)

    def _log_event(
        self,
        event_type: SimulationEventType,
        entity_id: Optional[str] = None,
        data: Optional[dict] = None
    ) -> SimulationEvent:
        """Log a simulation event and notify callbacks."""
        event = SimulationEvent(
            event_type=event_type,
            timestamp=self.current_time,
            entity_id=entity_id,
            data=data or {}
        )
        self.events.append(event)

        if self.verbose:
            print(f"  {event}")

        # Notify event callbacks
        for callback in self._event_callbacks:
            try:
                callback(event)
            except Exception as e:
                print(f"[SIM] Event callback error: {e}")

        return event

    def events_of_type(self, event_type: SimulationEventType) -> List[SimulationEvent]:
        return [e for e in self.events if e.event_type == event_type]

    # -------------------------------------------------------------------------
    # State Snapshot
    # -------------------------------------------------------------------------

    def get_snapshot(self) -> SimulationSnapshot:
        """
        Get the renderer-facing state after the last tick.

        Returns:
            SimulationSnapshot; vehicle fields are defaults if it is gone.
        """
        pose = self.vehicle_pose().copy()
        yaw, pitch, roll = pose.euler()
        return SimulationSnapshot(
            timestamp=self.current_time,
            has_vehicle=self.vehicle is not None,
            pose=pose,
            depth=self.kinematics.depth(pose),
            yaw=yaw,
            pitch=pitch,
            roll=roll,
            ballast=self.ballast.copy(),
            sweep_angle=self.sonar.sweep_angle,
            sweep_line=self.sonar.sweep_line(yaw),
            detections=list(self.sonar.detections),
            blips=self.sonar.blips,
            observer_position=self.observer.position.copy(),
            vitals=VitalsState(
                score=self.vitals.score,
                health=self.vitals.health,
                oxygen=self.vitals.oxygen,
            ),
            bubbles=[bubble.copy() for bubble in self.bubbles.bubbles],
            entity_count=len(self.wanderers),
        )

    def get_status(self) -> Dict[str, Any]:
        """Snapshot as a plain dictionary."""
        return self.get_snapshot().to_dict()
