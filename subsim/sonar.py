"""
Directional scan (sonar) subsystem for the submarine simulation core.

This module implements:
- A sweep angle that rotates at a fixed rate, independent of contacts
- A per-tick detection pass over every mobile entity within range
- Projection of contacts onto the circular sonar panel
- Blip and sweep-line placement for the display collaborator

The detection list is rebuilt from scratch every tick. There is no track
memory: a contact that leaves range simply disappears from the next list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .geometry import (
    SONAR_RANGE,
    SonarPanel,
    bearing,
    local_offset,
)
from .physics import Vector3D, VehiclePose


# =============================================================================
# CONSTANTS
# =============================================================================

# Sweep angular velocity (rad/s); the sweep turns towards negative angles
SWEEP_SPEED = 1.0

# Blips the panel can show at once
MAX_BLIPS = 10

# Dots drawn along the sweep line
SWEEP_LINE_SEGMENTS = 20


# =============================================================================
# DATACLASSES
# =============================================================================

@dataclass
class SweepState:
    """
    Rotating scan reference.

    Attributes:
        sweep_angle: Accumulated angle in radians. Unbounded; only trig
            functions consume it.
    """
    sweep_angle: float = 0.0


@dataclass(frozen=True)
class Detection:
    """
    One sonar contact for the current tick.

    Attributes:
        display_x: Panel X (pixels)
        display_y: Panel Y (pixels, growing downward)
        bearing: Bearing in [0, 2*pi), pi/2 is dead ahead
        distance: Range to the contact (world units)
        entity_id: Identifier of the detected entity
    """
    display_x: float
    display_y: float
    bearing: float
    distance: float
    entity_id: Optional[str] = None

    def as_record(self) -> Tuple[float, float, float]:
        """(display_x, display_y, bearing) triple."""
        return (self.display_x, self.display_y, self.bearing)


@dataclass
class SonarConfig:
    """
    Sonar parameters.

    Attributes:
        scan_range: Maximum detection range (world units)
        sweep_speed: Sweep angular velocity (rad/s)
        max_blips: Blips shown simultaneously
        sweep_segments: Dots along the sweep line
        panel: Panel geometry
    """
    scan_range: float = SONAR_RANGE
    sweep_speed: float = SWEEP_SPEED
    max_blips: int = MAX_BLIPS
    sweep_segments: int = SWEEP_LINE_SEGMENTS
    panel: SonarPanel = field(default_factory=SonarPanel)

    def __post_init__(self) -> None:
        """Validate sonar parameters."""
        if self.scan_range <= 0:
            raise ValueError("Sonar range must be positive")
        if self.max_blips < 0:
            raise ValueError("Blip count must not be negative")
        if self.sweep_segments <= 0:
            raise ValueError("Sweep line needs at least one segment")

    @classmethod
    def from_config_data(cls, data: dict) -> SonarConfig:
        """
        Create a SonarConfig from a configuration dictionary.

        Args:
            data: Sonar section of the simulation config

        Returns:
            Configured SonarConfig instance
        """
        return cls(
            scan_range=data.get("range", SONAR_RANGE),
            sweep_speed=data.get("sweep_speed", SWEEP_SPEED),
            max_blips=data.get("max_blips", MAX_BLIPS),
            sweep_segments=data.get("sweep_segments", SWEEP_LINE_SEGMENTS),
            panel=SonarPanel.from_config_data(data.get("panel", {})),
        )


# =============================================================================
# SWEEP
# =============================================================================

def advance_sweep(state: SweepState, dt: float, sweep_speed: float = SWEEP_SPEED) -> float:
    """
    Rotate the sweep by one tick.

    Args:
        state: Sweep state to update in place
        dt: Time step in seconds
        sweep_speed: Angular velocity (rad/s)

    Returns:
        The new sweep angle
    """
    state.sweep_angle -= sweep_speed * max(0.0, dt)
    return state.sweep_angle


def sweep_line_points(
    sweep_angle: float,
    vehicle_yaw: float,
    panel: Optional[SonarPanel] = None,
    segments: int = SWEEP_LINE_SEGMENTS
) -> List[Tuple[float, float]]:
    """
    Panel positions of the dots forming the sweep line.

    The line is drawn relative to the vehicle's heading, so the sweep
    angle is offset by the vehicle yaw.

    Args:
        sweep_angle: Current sweep angle
        vehicle_yaw: Vehicle yaw (rad)
        panel: Panel geometry
        segments: Number of dots, evenly spaced out to the rim

    Returns:
        List of (x, y) panel points from the center outward
    """
    panel = panel or SonarPanel()
    angle = sweep_angle + vehicle_yaw
    spacing = panel.radius / segments
    return [panel.point_at(angle, (i + 1) * spacing) for i in range(segments)]


# =============================================================================
# DETECTION
# =============================================================================

def detect_contacts(
    pose: Optional[VehiclePose],
    entities: Iterable[Tuple[str, Vector3D]],
    config: Optional[SonarConfig] = None
) -> List[Detection]:
    """
    Run one detection pass.

    Pure function of the vehicle pose and entity positions: calling it
    twice with the same inputs returns equal lists.

    Args:
        pose: Vehicle pose, or None if there is no vehicle
        entities: (entity_id, world_position) pairs
        config: Sonar parameters

    Returns:
        Contacts within range, in entity iteration order
    """
    config = config or SonarConfig()
    if pose is None:
        return []

    detections: List[Detection] = []
    for entity_id, position in entities:
        offset = position - pose.position
        distance = offset.magnitude
        if distance > config.scan_range:
            continue

        contact_bearing = bearing(local_offset(pose, position))
        x, y = config.panel.project(contact_bearing, distance, config.scan_range)
        detections.append(Detection(
            display_x=x,
            display_y=y,
            bearing=contact_bearing,
            distance=distance,
            entity_id=entity_id,
        ))

    return detections


def visible_blips(detections: List[Detection], max_blips: int = MAX_BLIPS) -> List[Detection]:
    """Contacts the panel can draw; anything past max_blips is dropped."""
    return detections[:max_blips]


class SonarSystem:
    """
    Owns the sweep and the current detection list.

    Usage:
        sonar = SonarSystem()
        sonar.update(pose, [("fish_0", Vector3D(0, -5, -10))], dt=0.016)
        for blip in sonar.blips:
            ...
    """

    def __init__(self, config: Optional[SonarConfig] = None) -> None:
        self.config = config or SonarConfig()
        self.sweep = SweepState()
        self.detections: List[Detection] = []

    @property
    def sweep_angle(self) -> float:
        return self.sweep.sweep_angle

    @property
    def blips(self) -> List[Detection]:
        return visible_blips(self.detections, self.config.max_blips)

    def update(
        self,
        pose: Optional[VehiclePose],
        entities: Iterable[Tuple[str, Vector3D]],
        dt: float
    ) -> List[Detection]:
        """
        Advance the sweep and replace the detection list.

        Args:
            pose: Vehicle pose, or None if there is no vehicle
            entities: (entity_id, world_position) pairs
            dt: Time step in seconds

        Returns:
            The new detection list
        """
        advance_sweep(self.sweep, dt, self.config.sweep_speed)
        self.detections = detect_contacts(pose, entities, self.config)
        return self.detections

    def sweep_line(self, vehicle_yaw: float) -> List[Tuple[float, float]]:
        """Sweep line dots for the current angle."""
        return sweep_line_points(
            self.sweep.sweep_angle,
            vehicle_yaw,
            self.config.panel,
            self.config.sweep_segments,
        )
