"""Submarine simulation core package."""

from .physics import (
    SURFACE_Y,
    Vector3D,
    Quaternion,
    VehiclePose,
)

from .geometry import (
    SonarPanel,
    bearing,
    normalize_angle,
    project_to_panel,
    shortest_angle_difference,
)

from .ballast import (
    # State types
    BallastState,
    BallastConfig,
    BallastTransition,
    # Controller
    BallastController,
    # Helpers
    time_to_blow,
    time_to_fill,
)

from .kinematics import (
    KinematicsConfig,
    MovementIntent,
    VehicleKinematics,
    net_buoyancy_force,
)

from .sonar import (
    Detection,
    SonarConfig,
    SonarSystem,
    SweepState,
    detect_contacts,
)

from .steering import (
    SteeringConfig,
    SteeringState,
    Wanderer,
    spawn_school,
    update_school,
    update_wanderer,
)

from .observer import (
    ObserverConfig,
    ObserverState,
    update_observer,
)

from .controls import ControlCommands
from .vitals import VitalsState
from .environment import Bubble, BubbleEmitter, WaveClock, wave_height
from .config import SimulationConfig, load_config

from .simulation import (
    SimulationEvent,
    SimulationEventType,
    SimulationSnapshot,
    SubmarineSimulation,
)

__all__ = [
    # Physics
    "SURFACE_Y",
    "Vector3D",
    "Quaternion",
    "VehiclePose",
    # Geometry
    "SonarPanel",
    "bearing",
    "normalize_angle",
    "project_to_panel",
    "shortest_angle_difference",
    # Ballast
    "BallastState",
    "BallastConfig",
    "BallastTransition",
    "BallastController",
    "time_to_blow",
    "time_to_fill",
    # Kinematics
    "KinematicsConfig",
    "MovementIntent",
    "VehicleKinematics",
    "net_buoyancy_force",
    # Sonar
    "Detection",
    "SonarConfig",
    "SonarSystem",
    "SweepState",
    "detect_contacts",
    # Steering
    "SteeringConfig",
    "SteeringState",
    "Wanderer",
    "spawn_school",
    "update_school",
    "update_wanderer",
    # Observer
    "ObserverConfig",
    "ObserverState",
    "update_observer",
    # Controls, vitals and environment
    "ControlCommands",
    "VitalsState",
    "Bubble",
    "BubbleEmitter",
    "WaveClock",
    "wave_height",
    # Configuration
    "SimulationConfig",
    "load_config",
    # Simulation
    "SimulationEvent",
    "SimulationEventType",
    "SimulationSnapshot",
    "SubmarineSimulation",
]
