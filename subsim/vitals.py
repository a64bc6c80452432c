"""
Crew vitals and fish collection.

Oxygen refills at the surface and slowly runs out below it; once it is gone
the crew loses health. Swimming close to a fish collects it for points and
a burst of oxygen.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from .physics import Vector3D
from .steering import Wanderer


# =============================================================================
# CONSTANTS
# =============================================================================

MAX_OXYGEN = 100.0
MAX_HEALTH = 100.0

# Oxygen gained per second at or above the surface
OXYGEN_REFILL_RATE = 5.0

# Oxygen used per second below the surface
OXYGEN_USE_RATE = 0.02

# Health lost per second without oxygen
SUFFOCATION_RATE = 5.0

# Collection radius and rewards
COLLECTION_DISTANCE = 2.0
COLLECTION_SCORE = 10
COLLECTION_OXYGEN = 20.0


@dataclass
class VitalsState:
    """
    Crew condition and score.

    Attributes:
        score: Points from collected fish
        health: 0.0 to 100.0
        oxygen: 0.0 to 100.0
    """
    score: int = 0
    health: float = MAX_HEALTH
    oxygen: float = MAX_OXYGEN

    @property
    def is_suffocating(self) -> bool:
        return self.oxygen <= 0.0


def update_vitals(state: VitalsState, depth: float, dt: float) -> None:
    """
    Advance oxygen and health by one tick (in place).

    Args:
        state: Vitals to update
        depth: Vehicle depth (<= 0 at or above the surface)
        dt: Time step in seconds
    """
    dt = max(0.0, dt)
    if depth <= 0.0:
        state.oxygen = min(MAX_OXYGEN, state.oxygen + OXYGEN_REFILL_RATE * dt)
    else:
        state.oxygen = max(0.0, state.oxygen - OXYGEN_USE_RATE * dt)

    if state.oxygen <= 0.0:
        state.health = max(0.0, state.health - SUFFOCATION_RATE * dt)


def collect_nearby(
    state: VitalsState,
    vehicle_position: Vector3D,
    wanderers: Dict[str, Wanderer],
    radius: float = COLLECTION_DISTANCE
) -> List[str]:
    """
    Remove every wanderer closer than radius and reward the crew.

    Args:
        state: Vitals to reward
        vehicle_position: Vehicle position
        wanderers: Live wanderers by id; collected ones are removed
        radius: Collection distance

    Returns:
        Ids of the collected wanderers
    """
    collected = [
        entity_id for entity_id, wanderer in wanderers.items()
        if vehicle_position.distance_to(wanderer.position) < radius
    ]
    for entity_id in collected:
        del wanderers[entity_id]
        state.score += COLLECTION_SCORE
        state.oxygen = min(MAX_OXYGEN, state.oxygen + COLLECTION_OXYGEN)
    return collected
