"""
Angular geometry for the submarine sonar and observer.

This module implements:
- Angle normalization into [0, 2*pi) and shortest signed angle differences
- Bearing of a target expressed in the vehicle's local frame
- Projection of (bearing, range) pairs onto the circular sonar panel

Bearings follow the sonar display convention: a target dead ahead of the
vehicle has bearing pi/2, which the panel draws straight up. Panel
coordinates are screen pixels with the vertical axis pointing down.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .physics import Vector3D, VehiclePose


# =============================================================================
# CONSTANTS
# =============================================================================

TWO_PI = 2.0 * math.pi
QUARTER_TURN = math.pi / 2.0

# Sonar panel layout (pixels)
SONAR_CENTER_X = 100.0
SONAR_CENTER_Y = 100.0
SONAR_RADIUS = 75.0

# Sonar detection range (world units)
SONAR_RANGE = 20.0

# Bearing that the panel draws at the top ("up")
BEARING_UP = QUARTER_TURN


# =============================================================================
# ANGLES
# =============================================================================

def normalize_angle(angle: float) -> float:
    """
    Map any real angle into [0, 2*pi).

    Python's modulo is floored, so negative inputs of any magnitude land in
    range. Tiny negative values can round up to exactly 2*pi and are folded
    back to 0.
    """
    wrapped = angle % TWO_PI
    if wrapped >= TWO_PI:
        return 0.0
    return wrapped


def shortest_angle_difference(current: float, target: float) -> float:
    """
    Signed angle to turn from current to target, wrapped into (-pi, pi].

    Args:
        current: Current angle in radians
        target: Desired angle in radians

    Returns:
        Difference in radians; positive means turn in the positive direction
    """
    diff = normalize_angle(target - current)
    if diff > math.pi:
        diff -= TWO_PI
    return diff


# =============================================================================
# BEARING AND PROJECTION
# =============================================================================

def bearing(local_offset: Vector3D) -> float:
    """
    Bearing of a target from its offset in the vehicle's local frame.

    The lateral and forward components are negated before atan2 so that
    starboard targets appear on the right of the panel, then a quarter turn
    is added so that dead ahead (local -Z) points up.

    Args:
        local_offset: Target position relative to the vehicle, rotated by
            the inverse of the vehicle's orientation

    Returns:
        Bearing in [0, 2*pi)
    """
    return normalize_angle(math.atan2(-local_offset.x, -local_offset.z) + QUARTER_TURN)


def local_offset(pose: VehiclePose, world_point: Vector3D) -> Vector3D:
    """Offset from the vehicle to a world point, in the vehicle's local frame."""
    return pose.to_local(world_point)


def project_to_panel(
    bearing_rad: float,
    distance: float,
    max_range: float = SONAR_RANGE,
    panel_radius: float = SONAR_RADIUS,
    center: tuple[float, float] = (SONAR_CENTER_X, SONAR_CENTER_Y)
) -> tuple[float, float]:
    """
    Project a (bearing, distance) pair onto panel coordinates.

    Distance scales linearly so that max_range lands on the panel rim.
    Nothing is clamped here; callers drop targets beyond max_range.

    Args:
        bearing_rad: Bearing from bearing()
        distance: Range to the target (world units)
        max_range: Range mapped to the rim
        panel_radius: Rim radius in pixels
        center: Panel center in pixels

    Returns:
        (x, y) in panel pixels, y growing downward
    """
    scaled = distance * (panel_radius / max_range)
    cx, cy = center
    return (
        cx + scaled * math.cos(bearing_rad),
        cy - scaled * math.sin(bearing_rad),
    )


@dataclass(frozen=True)
class SonarPanel:
    """
    Circular sonar display geometry.

    Attributes:
        center_x: Panel center X (pixels)
        center_y: Panel center Y (pixels)
        radius: Rim radius (pixels)
    """
    center_x: float = SONAR_CENTER_X
    center_y: float = SONAR_CENTER_Y
    radius: float = SONAR_RADIUS

    def __post_init__(self) -> None:
        if self.radius <= 0:
            raise ValueError("Sonar panel radius must be positive")

    @property
    def center(self) -> tuple[float, float]:
        return (self.center_x, self.center_y)

    def project(self, bearing_rad: float, distance: float, max_range: float) -> tuple[float, float]:
        """Project onto this panel."""
        return project_to_panel(bearing_rad, distance, max_range, self.radius, self.center)

    def point_at(self, angle_rad: float, pixel_distance: float) -> tuple[float, float]:
        """Panel point at a pixel distance from the center along angle_rad."""
        return (
            self.center_x + pixel_distance * math.cos(angle_rad),
            self.center_y - pixel_distance * math.sin(angle_rad),
        )

    @classmethod
    def from_config_data(cls, data: dict) -> SonarPanel:
        return cls(
            center_x=data.get("center_x", SONAR_CENTER_X),
            center_y=data.get("center_y", SONAR_CENTER_Y),
            radius=data.get("radius", SONAR_RADIUS),
        )
