"""
Trailing observer (camera) tracking.

The observer orbits behind the tracked vehicle. Its yaw chases the
vehicle's yaw with time-scaled exponential smoothing, its pitch comes
straight from camera input, and its position eases towards the orbit point
before it turns to face the vehicle.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from .geometry import shortest_angle_difference
from .physics import Quaternion, Vector3D, VehiclePose


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_DISTANCE = 15.0
HEIGHT_OFFSET = 5.0

# Yaw smoothing rate (1/s)
YAW_LERP_SPEED = 2.0

# Fraction of the remaining gap closed per tick
POSITION_LERP_FACTOR = 0.1

# Camera input rate (rad/s) and pitch limit (rad)
CAMERA_ROTATION_SPEED = 2.0
PITCH_LIMIT = 1.0


# =============================================================================
# DATACLASSES
# =============================================================================

@dataclass
class ObserverState:
    """
    Orbit parameters and transform of the observer.

    Attributes:
        distance: Orbit radius
        yaw: Current orbit yaw (rad)
        pitch: Orbit pitch (rad), clamped to the pitch limit
        target_yaw: Yaw being chased (the vehicle's yaw)
        position: Observer world position
        rotation: Observer orientation
    """
    distance: float = DEFAULT_DISTANCE
    yaw: float = 0.0
    pitch: float = 0.0
    target_yaw: float = 0.0
    position: Vector3D = field(default_factory=lambda: Vector3D(0.0, HEIGHT_OFFSET, DEFAULT_DISTANCE))
    rotation: Quaternion = field(default_factory=Quaternion.identity)


@dataclass
class ObserverConfig:
    """Observer smoothing and input parameters."""
    yaw_lerp_speed: float = YAW_LERP_SPEED
    position_lerp: float = POSITION_LERP_FACTOR
    height_offset: float = HEIGHT_OFFSET
    rotation_speed: float = CAMERA_ROTATION_SPEED
    pitch_limit: float = PITCH_LIMIT

    def __post_init__(self) -> None:
        if not 0.0 < self.position_lerp <= 1.0:
            raise ValueError("Position lerp factor must be in (0, 1]")
        if self.pitch_limit < 0:
            raise ValueError("Pitch limit must not be negative")

    @classmethod
    def from_config_data(cls, data: dict) -> ObserverConfig:
        return cls(
            yaw_lerp_speed=data.get("yaw_lerp_speed", YAW_LERP_SPEED),
            position_lerp=data.get("position_lerp", POSITION_LERP_FACTOR),
            height_offset=data.get("height_offset", HEIGHT_OFFSET),
            rotation_speed=data.get("rotation_speed", CAMERA_ROTATION_SPEED),
            pitch_limit=data.get("pitch_limit", PITCH_LIMIT),
        )


# =============================================================================
# UPDATE
# =============================================================================

def orbit_offset(distance: float, yaw: float, pitch: float, height_offset: float = HEIGHT_OFFSET) -> Vector3D:
    """Offset of the orbit point from the tracked body (behind it at yaw 0)."""
    return Vector3D(
        distance * math.sin(yaw),
        distance * math.sin(pitch) + height_offset,
        distance * math.cos(yaw) * math.cos(pitch),
    )


def apply_camera_input(
    state: ObserverState,
    yaw_input: float,
    pitch_input: float,
    dt: float,
    config: Optional[ObserverConfig] = None
) -> None:
    """Integrate camera rotation input; pitch is clamped to the limit."""
    config = config or ObserverConfig()
    step = config.rotation_speed * max(0.0, dt)
    state.yaw += yaw_input * step
    if pitch_input:
        limit = config.pitch_limit
        state.pitch = max(-limit, min(limit, state.pitch + pitch_input * step))


def update_observer(
    state: ObserverState,
    tracked: Optional[VehiclePose],
    dt: float,
    config: Optional[ObserverConfig] = None
) -> None:
    """
    Follow the tracked body for one tick (in place).

    Args:
        state: Observer state to update
        tracked: Pose of the tracked vehicle, or None if it is gone
        dt: Time step in seconds
        config: Smoothing parameters
    """
    config = config or ObserverConfig()
    if tracked is None:
        return

    state.target_yaw = tracked.rotation.yaw
    diff = shortest_angle_difference(state.yaw, state.target_yaw)
    state.yaw += diff * config.yaw_lerp_speed * max(0.0, dt)

    target = tracked.position + orbit_offset(
        state.distance, state.yaw, state.pitch, config.height_offset
    )
    state.position = state.position.lerp(target, config.position_lerp)

    facing = Quaternion.looking_at(state.position, tracked.position)
    if facing is not None:
        state.rotation = facing
