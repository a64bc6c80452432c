"""
Ambient environment: ballast bubbles and the sea surface.

Bubbles stream out under the hull while the vents flood the tanks, rise,
fade, and vanish at the surface. The surface itself is a sum of sine waves
that a renderer can sample per vertex.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional

from .ballast import BallastState
from .physics import SURFACE_Y, Vector3D


# =============================================================================
# CONSTANTS
# =============================================================================

# Seconds between bubbles
BUBBLE_SPAWN_INTERVAL = 0.08

# Rise speed (units/s)
BUBBLE_RISE_SPEED = 1.7

# Spawn point below the hull and lateral scatter
BUBBLE_DROP = 0.7
BUBBLE_SCATTER = 0.5

BUBBLE_MIN_RADIUS = 0.08
BUBBLE_RADIUS_JITTER = 0.06
BUBBLE_MIN_LIFETIME = 1.0
BUBBLE_LIFETIME_JITTER = 0.5
BUBBLE_MAX_ALPHA = 0.45

# Sea surface waves
WAVE_HEIGHT = 0.3
WAVE_SPEED = 1.5
WAVE_LENGTH = 0.4


# =============================================================================
# BUBBLES
# =============================================================================

@dataclass
class Bubble:
    """
    One rising air bubble.

    Attributes:
        position: World position
        radius: Sphere radius
        lifetime: Total lifetime (seconds)
        age: Seconds since spawn
    """
    position: Vector3D
    radius: float
    lifetime: float
    age: float = 0.0

    @property
    def remaining(self) -> float:
        return max(0.0, self.lifetime - self.age)

    @property
    def alpha(self) -> float:
        """Opacity fading from the maximum to zero over the lifetime."""
        if self.lifetime <= 0:
            return 0.0
        return BUBBLE_MAX_ALPHA * max(0.0, min(1.0, self.remaining / self.lifetime))

    @property
    def expired(self) -> bool:
        return self.age >= self.lifetime

    def copy(self) -> Bubble:
        return Bubble(self.position.copy(), self.radius, self.lifetime, self.age)


@dataclass
class BubbleEmitter:
    """
    Spawns and animates ballast bubbles.

    Attributes:
        spawn_timer: Time accumulated towards the next bubble
        bubbles: Live bubbles
        rng: Random source for scatter, size and lifetime
        surface_y: Height where bubbles pop and spawning stops
    """
    spawn_timer: float = 0.0
    bubbles: List[Bubble] = field(default_factory=list)
    rng: random.Random = field(default_factory=random.Random, repr=False)
    surface_y: float = SURFACE_Y

    @classmethod
    def seeded(cls, seed: Optional[int], surface_y: float = SURFACE_Y) -> BubbleEmitter:
        return cls(rng=random.Random(seed), surface_y=surface_y)

    def _spawn(self, vehicle_position: Vector3D) -> Bubble:
        r = self.rng.random()
        offset = Vector3D(
            (self.rng.random() - 0.5) * BUBBLE_SCATTER,
            -BUBBLE_DROP,
            (self.rng.random() - 0.5) * BUBBLE_SCATTER,
        )
        bubble = Bubble(
            position=vehicle_position + offset,
            radius=BUBBLE_MIN_RADIUS + r * BUBBLE_RADIUS_JITTER,
            lifetime=BUBBLE_MIN_LIFETIME + r * BUBBLE_LIFETIME_JITTER,
        )
        self.bubbles.append(bubble)
        return bubble

    def update(
        self,
        ballast: BallastState,
        vehicle_position: Optional[Vector3D],
        dt: float
    ) -> int:
        """
        Spawn and animate bubbles for one tick.

        Bubbles spawn while the vents are open, the vehicle is submerged
        and the tanks are not yet full. Otherwise the spawn timer resets.

        Args:
            ballast: Ballast state (read only)
            vehicle_position: Vehicle position, or None if there is no vehicle
            dt: Time step in seconds

        Returns:
            Number of bubbles spawned
        """
        dt = max(0.0, dt)
        spawned = 0

        venting = (
            vehicle_position is not None
            and ballast.vents_open
            and vehicle_position.y < self.surface_y
            and ballast.fill_level < 1.0
        )
        if venting:
            self.spawn_timer += dt
            while self.spawn_timer > BUBBLE_SPAWN_INTERVAL:
                self.spawn_timer -= BUBBLE_SPAWN_INTERVAL
                self._spawn(vehicle_position)
                spawned += 1
        else:
            self.spawn_timer = 0.0

        survivors = []
        for bubble in self.bubbles:
            bubble.position = bubble.position + Vector3D(0.0, BUBBLE_RISE_SPEED * dt, 0.0)
            if bubble.position.y >= self.surface_y:
                continue
            bubble.age += dt
            if bubble.expired:
                continue
            survivors.append(bubble)
        self.bubbles = survivors

        return spawned


# =============================================================================
# SEA SURFACE
# =============================================================================

def wave_height(x: float, z: float, elapsed: float) -> float:
    """
    Height of the sea surface at (x, z) after elapsed seconds.

    Four superposed sine waves travelling in different directions.
    """
    time_factor = elapsed * (WAVE_SPEED / WAVE_LENGTH)
    wave1 = math.sin(x * 8.0 + time_factor) * WAVE_HEIGHT * 0.4
    wave2 = math.sin(z * 6.0 - time_factor * 0.7) * WAVE_HEIGHT * 0.3
    wave3 = math.sin((x + z) * 4.0 + time_factor * 1.2) * WAVE_HEIGHT * 0.2
    wave4 = math.sin((x - z) * 3.0 - time_factor * 0.5) * WAVE_HEIGHT * 0.1
    return wave1 + wave2 + wave3 + wave4


@dataclass
class WaveClock:
    """Elapsed time driving the surface animation."""
    elapsed: float = 0.0

    def advance(self, dt: float) -> float:
        self.elapsed += max(0.0, dt)
        return self.elapsed

    def height_at(self, x: float, z: float) -> float:
        return wave_height(x, z, self.elapsed)
