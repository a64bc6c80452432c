"""
Autonomous steering for the mobile entities (fish) of the submarine core.

Each wanderer swims along a unit direction that is re-picked every few
seconds, with a small lateral sway on top. The "random" direction and
interval come from smooth trigonometric functions of the entity's own timer
and position, so a run is fully reproducible.

Containment rules keep every wanderer in the water column:
- never above the surface (direction reflected downward)
- nudged back towards the origin beyond a maximum radius
- optionally never below a floor (direction reflected upward)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .physics import SURFACE_Y, Vector3D


# =============================================================================
# CONSTANTS
# =============================================================================

# Wander area radius around the origin
MAX_WANDER_RADIUS = 25.0

# Speed of the pull back towards the origin outside the wander area
RETURN_SPEED = 2.0

# Range of direction change intervals (seconds)
MIN_CHANGE_INTERVAL = 0.5
MAX_CHANGE_INTERVAL = 3.5
BASE_CHANGE_INTERVAL = 1.5

# Sway amplitude
SWAY_AMPLITUDE = 0.3

# School layout
SCHOOL_SIZE = 20
SCHOOL_BASE_RADIUS = 10.0
SCHOOL_RADIUS_STEP = 2.0
SCHOOL_BASE_DEPTH = 5.0
SCHOOL_DEPTH_STEP = 0.5
DEFAULT_SWIM_SPEED = 1.0


# =============================================================================
# DATACLASSES
# =============================================================================

@dataclass
class SteeringState:
    """
    Wandering state of one entity.

    Attributes:
        direction: Unit swim direction
        speed: Swim speed (units/s)
        change_timer: Seconds since the last direction change
        change_interval: Seconds between direction changes
    """
    direction: Vector3D = field(default_factory=lambda: Vector3D(0.0, 0.0, -1.0))
    speed: float = DEFAULT_SWIM_SPEED
    change_timer: float = 0.0
    change_interval: float = 1.0

    def __post_init__(self) -> None:
        unit = self.direction.normalized()
        self.direction = unit if unit.magnitude_squared > 0 else Vector3D(0.0, 0.0, -1.0)

    def set_direction(self, direction: Vector3D) -> None:
        """Assign a new direction, renormalized. A zero vector is ignored."""
        unit = direction.normalized()
        if unit.magnitude_squared > 0:
            self.direction = unit


@dataclass
class Wanderer:
    """
    A mobile entity driven by autonomous steering.

    Attributes:
        entity_id: Unique identifier
        position: World position
        steering: Wandering state, destroyed with the entity
    """
    entity_id: str
    position: Vector3D
    steering: SteeringState = field(default_factory=SteeringState)


@dataclass
class SteeringConfig:
    """
    Containment and pacing parameters.

    Attributes:
        surface_y: Height entities may not rise above
        max_radius: Radius of the wander area around the origin
        return_speed: Speed of the pull back into the wander area
        floor_y: Optional lowest allowed height (None disables the floor)
        min_interval: Shortest direction change interval
        max_interval: Longest direction change interval
    """
    surface_y: float = SURFACE_Y
    max_radius: float = MAX_WANDER_RADIUS
    return_speed: float = RETURN_SPEED
    floor_y: Optional[float] = None
    min_interval: float = MIN_CHANGE_INTERVAL
    max_interval: float = MAX_CHANGE_INTERVAL

    def __post_init__(self) -> None:
        """Validate containment parameters."""
        if self.max_radius <= 0:
            raise ValueError("Wander radius must be positive")
        if self.min_interval <= 0 or self.max_interval < self.min_interval:
            raise ValueError("Change interval range is invalid")
        if self.floor_y is not None and self.floor_y >= self.surface_y:
            raise ValueError("Floor must lie below the surface")

    @classmethod
    def from_config_data(cls, data: dict) -> SteeringConfig:
        """
        Create a SteeringConfig from a configuration dictionary.

        Args:
            data: Steering section of the simulation config

        Returns:
            Configured SteeringConfig instance
        """
        return cls(
            surface_y=data.get("surface_y", SURFACE_Y),
            max_radius=data.get("max_radius", MAX_WANDER_RADIUS),
            return_speed=data.get("return_speed", RETURN_SPEED),
            floor_y=data.get("floor_y"),
            min_interval=data.get("min_interval", MIN_CHANGE_INTERVAL),
            max_interval=data.get("max_interval", MAX_CHANGE_INTERVAL),
        )


# =============================================================================
# PSEUDO-RANDOM PICKS
# =============================================================================

def wander_direction(timer: float, position: Vector3D) -> Vector3D:
    """
    Raw (unnormalized) wander direction.

    Vertical amplitude is a quarter of the lateral one, so entities mostly
    swim level.
    """
    return Vector3D(
        math.sin(timer * 0.5 + position.x * 0.1) * 2.0 - 1.0,
        math.cos(timer * 0.3 + position.y * 0.2) * 0.5 - 0.25,
        math.sin(timer * 0.7 + position.z * 0.1) * 2.0 - 1.0,
    )


def change_interval(
    timer: float,
    position: Vector3D,
    min_interval: float = MIN_CHANGE_INTERVAL,
    max_interval: float = MAX_CHANGE_INTERVAL
) -> float:
    """Next direction change interval, clamped to [min_interval, max_interval]."""
    interval = BASE_CHANGE_INTERVAL + math.sin(timer * 0.2 + position.x * 0.01) * 2.0
    return max(min_interval, min(max_interval, interval))


def sway_offset(timer: float, position: Vector3D) -> Vector3D:
    """Lateral sway added on top of the base direction."""
    return Vector3D(
        math.sin(timer * 2.0 + position.x * 0.1) * SWAY_AMPLITUDE,
        0.0,
        math.cos(timer * 1.5 + position.z * 0.1) * SWAY_AMPLITUDE,
    )


# =============================================================================
# UPDATE
# =============================================================================

def update_wanderer(
    wanderer: Wanderer,
    dt: float,
    config: Optional[SteeringConfig] = None
) -> bool:
    """
    Advance one wanderer by one tick (in place).

    Args:
        wanderer: Entity to move
        dt: Time step in seconds
        config: Containment parameters

    Returns:
        True if the direction was re-picked this tick
    """
    config = config or SteeringConfig()
    state = wanderer.steering
    dt = max(0.0, dt)
    changed = False

    state.change_timer += dt
    if state.change_timer >= state.change_interval:
        expired = state.change_timer
        state.set_direction(wander_direction(expired, wanderer.position))
        state.change_timer = 0.0
        state.change_interval = change_interval(
            state.change_timer, wanderer.position, config.min_interval, config.max_interval
        )
        changed = True

    step = state.speed * dt
    sway = sway_offset(state.change_timer, wanderer.position)
    wanderer.position = wanderer.position + state.direction * step + sway * step

    # Surface: clamp and head down
    if wanderer.position.y > config.surface_y:
        wanderer.position = wanderer.position.with_y(config.surface_y)
        state.direction = state.direction.with_y(-abs(state.direction.y))

    # Wander area: steer back towards the origin
    if wanderer.position.magnitude > config.max_radius:
        to_origin = -wanderer.position.normalized()
        wanderer.position = wanderer.position + to_origin * (config.return_speed * dt)

    # Floor: clamp and head up
    if config.floor_y is not None and wanderer.position.y < config.floor_y:
        wanderer.position = wanderer.position.with_y(config.floor_y)
        state.direction = state.direction.with_y(abs(state.direction.y))

    return changed


def update_school(
    wanderers: Dict[str, Wanderer],
    dt: float,
    config: Optional[SteeringConfig] = None
) -> int:
    """
    Advance every wanderer independently.

    Returns:
        Number of wanderers that re-picked their direction
    """
    config = config or SteeringConfig()
    return sum(1 for w in wanderers.values() if update_wanderer(w, dt, config))


def spawn_school(
    count: int = SCHOOL_SIZE,
    speed: float = DEFAULT_SWIM_SPEED,
    id_prefix: str = "fish"
) -> List[Wanderer]:
    """
    Lay out a school of wanderers on a widening, deepening ring.

    Entity i sits at angle 2*pi*i/count, radius 10 + 2i and height
    -5 - 0.5i, initially swimming tangentially around the ring.

    Args:
        count: Number of entities
        speed: Initial swim speed
        id_prefix: Prefix for entity ids

    Returns:
        List of Wanderer instances
    """
    school = []
    for i in range(count):
        angle = i * 2.0 * math.pi / count
        radius = SCHOOL_BASE_RADIUS + i * SCHOOL_RADIUS_STEP
        position = Vector3D(
            math.cos(angle) * radius,
            -SCHOOL_BASE_DEPTH - i * SCHOOL_DEPTH_STEP,
            math.sin(angle) * radius,
        )
        tangent = Vector3D(-math.sin(angle), 0.0, math.cos(angle))
        school.append(Wanderer(
            entity_id=f"{id_prefix}_{i}",
            position=position,
            steering=SteeringState(direction=tangent, speed=speed),
        ))
    return school
