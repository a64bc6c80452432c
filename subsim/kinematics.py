#!/usr/bin/env python3
"""
Vehicle Kinematics for the Submarine Simulation Core

Integrates the controllable vehicle's motion once per tick:
- Yaw from turn input (rotation composition)
- Horizontal thrust along the vehicle's heading, or drag when idle
- Net buoyancy from the ballast fill level
- Euler integration of position
- Hard surface boundary at y = 0

Contact response with other bodies belongs to an external physics engine;
this module only produces the velocity and pose it would be fed.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .physics import SURFACE_Y, Quaternion, Vector3D, VehiclePose


# =============================================================================
# CONSTANTS
# =============================================================================

# Forward speed while thrust is commanded (units/s)
VEHICLE_SPEED = 10.0

# Yaw rate at full turn input (rad/s)
TURN_SPEED = 1.5

# Velocity multiplier per tick without thrust
DRAG_FACTOR = 0.9

# Constant upward buoyancy force
BASE_BUOYANCY_FORCE = 5.0

# Downward force per unit of ballast fill
BALLAST_WEIGHT_FORCE = 15.0


# =============================================================================
# INPUT AND CONFIG
# =============================================================================

@dataclass
class MovementIntent:
    """
    Continuous movement request for one tick.

    Attributes:
        forward: -1.0 (full astern) to 1.0 (full ahead)
        turn: -1.0 (turn right) to 1.0 (turn left)
    """
    forward: float = 0.0
    turn: float = 0.0

    def __post_init__(self) -> None:
        self.forward = max(-1.0, min(1.0, self.forward))
        self.turn = max(-1.0, min(1.0, self.turn))

    @property
    def has_thrust(self) -> bool:
        return self.forward != 0.0


@dataclass
class KinematicsConfig:
    """
    Vehicle handling parameters.

    Attributes:
        speed: Forward speed under thrust (units/s)
        turn_speed: Yaw rate at full input (rad/s)
        drag_factor: Per-tick velocity multiplier without thrust (0 < f < 1)
        base_buoyancy: Constant upward force
        ballast_weight: Downward force per unit of fill level
        surface_y: Height of the surface plane
    """
    speed: float = VEHICLE_SPEED
    turn_speed: float = TURN_SPEED
    drag_factor: float = DRAG_FACTOR
    base_buoyancy: float = BASE_BUOYANCY_FORCE
    ballast_weight: float = BALLAST_WEIGHT_FORCE
    surface_y: float = SURFACE_Y

    def __post_init__(self) -> None:
        """Validate handling parameters."""
        if self.speed < 0:
            raise ValueError("Vehicle speed must not be negative")
        if self.turn_speed < 0:
            raise ValueError("Turn speed must not be negative")
        if not 0.0 < self.drag_factor < 1.0:
            raise ValueError("Drag factor must be between 0 and 1")

    @classmethod
    def from_config_data(cls, data: dict) -> KinematicsConfig:
        """
        Create a KinematicsConfig from a configuration dictionary.

        Args:
            data: Vehicle section of the simulation config

        Returns:
            Configured KinematicsConfig instance
        """
        return cls(
            speed=data.get("speed", VEHICLE_SPEED),
            turn_speed=data.get("turn_speed", TURN_SPEED),
            drag_factor=data.get("drag_factor", DRAG_FACTOR),
            base_buoyancy=data.get("base_buoyancy", BASE_BUOYANCY_FORCE),
            ballast_weight=data.get("ballast_weight", BALLAST_WEIGHT_FORCE),
            surface_y=data.get("surface_y", SURFACE_Y),
        )


# =============================================================================
# FORCES
# =============================================================================

def net_buoyancy_force(
    fill_level: float,
    base_buoyancy: float = BASE_BUOYANCY_FORCE,
    ballast_weight: float = BALLAST_WEIGHT_FORCE
) -> float:
    """
    Net vertical force from buoyancy and ballast.

    F = base_buoyancy - fill_level * ballast_weight

    Args:
        fill_level: Ballast tank fill (0.0 to 1.0)
        base_buoyancy: Constant upward force
        ballast_weight: Downward force per unit of fill

    Returns:
        Net force (positive is upward)
    """
    return base_buoyancy - fill_level * ballast_weight


def neutral_fill_level(
    base_buoyancy: float = BASE_BUOYANCY_FORCE,
    ballast_weight: float = BALLAST_WEIGHT_FORCE
) -> float:
    """Fill level at which the vehicle neither rises nor sinks."""
    if ballast_weight <= 0:
        return 1.0
    return max(0.0, min(1.0, base_buoyancy / ballast_weight))


def thrust_velocity(rotation: Quaternion, intent: MovementIntent, speed: float) -> Vector3D:
    """
    World-space velocity commanded by the movement intent.

    The local forward axis (-Z) is rotated into world space and only its
    horizontal part is kept, so pitch never turns thrust into climb.
    """
    heading = rotation.rotate(Vector3D.forward())
    return heading.horizontal * (intent.forward * speed)


# =============================================================================
# INTEGRATION
# =============================================================================

class VehicleKinematics:
    """
    Per-tick motion integrator for the controllable vehicle.

    Usage:
        kinematics = VehicleKinematics()
        kinematics.update(pose, MovementIntent(forward=1.0), fill_level=0.2, dt=0.016)
    """

    def __init__(self, config: Optional[KinematicsConfig] = None) -> None:
        self.config = config or KinematicsConfig()

    def depth(self, pose: VehiclePose) -> float:
        """Depth below the configured surface."""
        return self.config.surface_y - pose.position.y

    def update(
        self,
        pose: VehiclePose,
        intent: MovementIntent,
        fill_level: float,
        dt: float
    ) -> bool:
        """
        Advance the vehicle pose by one tick (in place).

        Args:
            pose: Vehicle pose to update
            intent: Movement request for this tick
            fill_level: Ballast fill read at tick start
            dt: Time step in seconds

        Returns:
            True if the surface boundary clamped the vehicle this tick
        """
        cfg = self.config
        dt = max(0.0, dt)

        # Yaw composes onto the current orientation, independent of translation
        if intent.turn != 0.0:
            yaw_step = Quaternion.from_rotation_y(intent.turn * cfg.turn_speed * dt)
            pose.rotation = (yaw_step * pose.rotation).normalized()

        if intent.has_thrust:
            thrust = thrust_velocity(pose.rotation, intent, cfg.speed)
            pose.velocity = Vector3D(thrust.x, pose.velocity.y, thrust.z)
        else:
            pose.velocity = pose.velocity * cfg.drag_factor

        # Buoyancy acts at or below the surface
        if pose.position.y <= cfg.surface_y:
            force = net_buoyancy_force(fill_level, cfg.base_buoyancy, cfg.ballast_weight)
            pose.velocity = pose.velocity + Vector3D(0.0, force * dt, 0.0)

        pose.position = pose.position + pose.velocity * dt

        return clamp_to_surface(pose, cfg.surface_y)


def clamp_to_surface(pose: VehiclePose, surface_y: float = SURFACE_Y) -> bool:
    """
    Enforce the surface plane as a hard boundary.

    Args:
        pose: Vehicle pose to correct in place
        surface_y: Height of the surface plane

    Returns:
        True if the pose was above the surface and got clamped
    """
    if pose.position.y <= surface_y:
        return False

    pose.position = pose.position.with_y(surface_y)
    if pose.velocity.y > 0.0:
        pose.velocity = pose.velocity.with_y(0.0)
    return True
