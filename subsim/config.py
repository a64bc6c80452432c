"""
Simulation configuration loading.

Every subsystem keeps its defaults as module constants and exposes a
``from_config_data`` classmethod. SimulationConfig gathers them, and
load_config reads the whole thing from a JSON file such as
``data/submarine.json``. Missing keys fall back to the defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .ballast import BallastConfig
from .kinematics import KinematicsConfig
from .observer import ObserverConfig
from .sonar import SonarConfig
from .steering import DEFAULT_SWIM_SPEED, SCHOOL_SIZE, SteeringConfig


DEFAULT_TIME_STEP = 1.0 / 60.0

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "data" / "submarine.json"


@dataclass
class SimulationConfig:
    """
    Complete configuration of a simulation run.

    Attributes:
        time_step: Default tick length in seconds
        school_size: Number of wanderers spawned at start
        swim_speed: Initial wanderer speed
        seed: Random seed for bubble scatter (None for nondeterministic)
        ballast: Ballast controller rates
        vehicle: Vehicle handling
        sonar: Sonar parameters
        steering: Wanderer containment
        observer: Observer smoothing
    """
    time_step: float = DEFAULT_TIME_STEP
    school_size: int = SCHOOL_SIZE
    swim_speed: float = DEFAULT_SWIM_SPEED
    seed: Optional[int] = None
    ballast: BallastConfig = field(default_factory=BallastConfig)
    vehicle: KinematicsConfig = field(default_factory=KinematicsConfig)
    sonar: SonarConfig = field(default_factory=SonarConfig)
    steering: SteeringConfig = field(default_factory=SteeringConfig)
    observer: ObserverConfig = field(default_factory=ObserverConfig)

    def __post_init__(self) -> None:
        """Validate run parameters."""
        if self.time_step <= 0:
            raise ValueError("Time step must be positive")
        if self.school_size < 0:
            raise ValueError("School size must not be negative")

    @classmethod
    def from_config_data(cls, data: dict) -> SimulationConfig:
        """
        Create a SimulationConfig from a configuration dictionary.

        Args:
            data: Parsed configuration (see data/submarine.json)

        Returns:
            Configured SimulationConfig instance
        """
        simulation = data.get("simulation", {})
        school = data.get("school", {})
        return cls(
            time_step=simulation.get("time_step", DEFAULT_TIME_STEP),
            seed=simulation.get("seed"),
            school_size=school.get("size", SCHOOL_SIZE),
            swim_speed=school.get("swim_speed", DEFAULT_SWIM_SPEED),
            ballast=BallastConfig.from_config_data(data.get("ballast", {})),
            vehicle=KinematicsConfig.from_config_data(data.get("vehicle", {})),
            sonar=SonarConfig.from_config_data(data.get("sonar", {})),
            steering=SteeringConfig.from_config_data(data.get("steering", {})),
            observer=ObserverConfig.from_config_data(data.get("observer", {})),
        )


def load_config(filepath: str | Path = DEFAULT_CONFIG_PATH) -> SimulationConfig:
    """
    Load a simulation configuration from a JSON file.

    Args:
        filepath: Path to the configuration file.

    Returns:
        SimulationConfig built from the file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If a value fails validation.
    """
    with open(filepath, "r") as f:
        return SimulationConfig.from_config_data(json.load(f))
