"""
Per-tick control commands for the submarine simulation core.

The host polls its own input devices; this module only turns "which keys
are held / were just pressed" into a ControlCommands value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .kinematics import MovementIntent


# Default key bindings
KEY_FORWARD = "w"
KEY_BACKWARD = "s"
KEY_TURN_LEFT = "a"
KEY_TURN_RIGHT = "d"
KEY_TOGGLE_VENTS = "q"
KEY_TOGGLE_AIR_VALVE = "e"
KEY_TOGGLE_COMPRESSOR = "r"
KEY_CAMERA_LEFT = "left"
KEY_CAMERA_RIGHT = "right"
KEY_CAMERA_UP = "up"
KEY_CAMERA_DOWN = "down"


def _axis(held: set, positive: str, negative: str) -> float:
    value = 0.0
    if positive in held:
        value += 1.0
    if negative in held:
        value -= 1.0
    return value


@dataclass
class ControlCommands:
    """
    Everything the vehicle's operator asks for in one tick.

    Toggles are edge-triggered (true only on the tick the key went down).
    Camera inputs are -1.0 to 1.0 and are clamped on construction.

    Attributes:
        toggle_vents: Flip the ballast vents
        toggle_air_valve: Flip the air valve
        toggle_compressor: Flip the air compressor
        movement: Thrust and turn request
        camera_yaw: Observer yaw input (positive turns the orbit clockwise)
        camera_pitch: Observer pitch input (positive raises the observer)
    """
    toggle_vents: bool = False
    toggle_air_valve: bool = False
    toggle_compressor: bool = False
    movement: MovementIntent = field(default_factory=MovementIntent)
    camera_yaw: float = 0.0
    camera_pitch: float = 0.0

    def __post_init__(self) -> None:
        self.camera_yaw = max(-1.0, min(1.0, self.camera_yaw))
        self.camera_pitch = max(-1.0, min(1.0, self.camera_pitch))

    @property
    def is_idle(self) -> bool:
        """True when nothing at all is requested."""
        return not (
            self.toggle_vents or self.toggle_air_valve or self.toggle_compressor
            or self.movement.forward or self.movement.turn
            or self.camera_yaw or self.camera_pitch
        )

    @classmethod
    def from_keys(cls, held: Iterable[str] = (), pressed: Iterable[str] = ()) -> ControlCommands:
        """
        Build commands from key names.

        Args:
            held: Keys currently down (lower-case names)
            pressed: Keys that went down this tick

        Returns:
            ControlCommands for the tick
        """
        held = {k.lower() for k in held}
        pressed = {k.lower() for k in pressed}
        return cls(
            toggle_vents=KEY_TOGGLE_VENTS in pressed,
            toggle_air_valve=KEY_TOGGLE_AIR_VALVE in pressed,
            toggle_compressor=KEY_TOGGLE_COMPRESSOR in pressed,
            movement=MovementIntent(
                forward=_axis(held, KEY_FORWARD, KEY_BACKWARD),
                turn=_axis(held, KEY_TURN_LEFT, KEY_TURN_RIGHT),
            ),
            camera_yaw=_axis(held, KEY_CAMERA_RIGHT, KEY_CAMERA_LEFT),
            camera_pitch=_axis(held, KEY_CAMERA_UP, KEY_CAMERA_DOWN),
        )
