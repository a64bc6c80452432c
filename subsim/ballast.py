"""
Ballast and Power system for the submarine simulation core.

This module implements the vehicle's buoyancy resources:
- Ballast tanks that fill with sea water through the vents
- Compressed air that blows the tanks empty through the air valve
- An air compressor that refills the air bottles at the surface
- Electrical power drawn by the compressor and recharged when idle

Resource Flow:
1. Toggle requests open/close the vents, the air valve and the compressor
2. A running compressor (surface only) turns electricity into compressed air
3. An idle compressor lets electricity recharge
4. Open vents flood the tanks; an open air valve spends air to empty them
5. Empty tanks close the air valve automatically

Every quantity is clamped to its range; nothing here raises during a tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional


# =============================================================================
# CONSTANTS
# =============================================================================

# Tank fill rate per second with vents open
BALLAST_FILL_RATE = 0.3

# Tank drain rate per second with the air valve open
BALLAST_DRAIN_RATE = 0.4

# Compressed air used per unit of drained water
AIR_PER_DRAIN = 0.5

# Compressed air generation rate per second
COMPRESSED_AIR_RATE = 0.2

# Electricity drained per second while the compressor runs
COMPRESSOR_POWER_DRAIN = 0.5

# Electricity recharged per second while the compressor is off
POWER_RECHARGE_RATE = 0.1

# Resource limits
MAX_FILL_LEVEL = 1.0
MAX_COMPRESSED_AIR = 1.0
MAX_ELECTRICITY = 100.0


# =============================================================================
# TRANSITIONS
# =============================================================================

class BallastTransition(Enum):
    """Notable state changes reported by a controller tick."""
    VENTS_OPENED = auto()
    VENTS_CLOSED = auto()
    AIR_VALVE_OPENED = auto()
    AIR_VALVE_CLOSED = auto()
    AIR_VALVE_AUTO_CLOSED = auto()
    COMPRESSOR_STARTED = auto()
    COMPRESSOR_STOPPED = auto()
    COMPRESSOR_FORCED_OFF = auto()
    TANKS_FULL = auto()
    TANKS_EMPTY = auto()
    AIR_EXHAUSTED = auto()
    ELECTRICITY_DEPLETED = auto()


# =============================================================================
# BALLAST STATE
# =============================================================================

@dataclass
class BallastState:
    """
    Buoyancy and power resources of one vehicle.

    Only BallastController writes these fields; every other subsystem
    reads them.

    Attributes:
        fill_level: Tank water fraction (0.0 = empty/buoyant, 1.0 = full/sinks).
        vents_open: Sea water flows in while open.
        air_valve_open: Compressed air blows the tanks while open.
        compressed_air: Stored compressed air (0.0 to 1.0).
        compressor_on: Air compressor is running.
        electricity: Available electricity (0.0 to 100.0).
    """
    fill_level: float = 0.0
    vents_open: bool = False
    air_valve_open: bool = False
    compressed_air: float = MAX_COMPRESSED_AIR
    compressor_on: bool = False
    electricity: float = MAX_ELECTRICITY

    @property
    def ballast_percent(self) -> float:
        """Tank fill as percentage."""
        return self.fill_level * 100.0

    @property
    def air_percent(self) -> float:
        """Compressed air as percentage."""
        return self.compressed_air * 100.0

    @property
    def electricity_percent(self) -> float:
        """Electricity is already stored on a 0-100 scale."""
        return self.electricity

    @property
    def vents_status(self) -> str:
        return "OPEN" if self.vents_open else "CLOSED"

    @property
    def air_valve_status(self) -> str:
        return "OPEN" if self.air_valve_open else "CLOSED"

    @property
    def compressor_status(self) -> str:
        return "ON" if self.compressor_on else "OFF"

    def copy(self) -> BallastState:
        return BallastState(
            fill_level=self.fill_level,
            vents_open=self.vents_open,
            air_valve_open=self.air_valve_open,
            compressed_air=self.compressed_air,
            compressor_on=self.compressor_on,
            electricity=self.electricity,
        )

    def get_status(self) -> dict:
        """
        Get current ballast status for display.

        Returns:
            Dictionary with percentages and indicator strings.
        """
        return {
            "ballast_percent": self.ballast_percent,
            "air_percent": self.air_percent,
            "electricity_percent": self.electricity_percent,
            "vents": self.vents_status,
            "air_valve": self.air_valve_status,
            "compressor": self.compressor_status,
        }


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class BallastConfig:
    """
    Rates for the ballast controller.

    Attributes:
        fill_rate: Tank fill per second with vents open.
        drain_rate: Tank drain per second with the air valve open.
        air_per_drain: Compressed air spent per unit of drained water.
        air_rate: Compressed air generated per second.
        compressor_drain: Electricity spent per second by the compressor.
        recharge_rate: Electricity recharged per second while idle.
    """
    fill_rate: float = BALLAST_FILL_RATE
    drain_rate: float = BALLAST_DRAIN_RATE
    air_per_drain: float = AIR_PER_DRAIN
    air_rate: float = COMPRESSED_AIR_RATE
    compressor_drain: float = COMPRESSOR_POWER_DRAIN
    recharge_rate: float = POWER_RECHARGE_RATE

    def __post_init__(self) -> None:
        """Validate rates."""
        for name in ("fill_rate", "drain_rate", "air_per_drain", "air_rate",
                     "compressor_drain", "recharge_rate"):
            if getattr(self, name) < 0:
                raise ValueError(f"Ballast {name} must not be negative")

    @classmethod
    def from_config_data(cls, data: dict) -> BallastConfig:
        """
        Create a BallastConfig from a configuration dictionary.

        Args:
            data: Ballast section of the simulation config.

        Returns:
            Configured BallastConfig instance.
        """
        return cls(
            fill_rate=data.get("fill_rate", BALLAST_FILL_RATE),
            drain_rate=data.get("drain_rate", BALLAST_DRAIN_RATE),
            air_per_drain=data.get("air_per_drain", AIR_PER_DRAIN),
            air_rate=data.get("air_rate", COMPRESSED_AIR_RATE),
            compressor_drain=data.get("compressor_drain", COMPRESSOR_POWER_DRAIN),
            recharge_rate=data.get("recharge_rate", POWER_RECHARGE_RATE),
        )


# =============================================================================
# CONTROLLER
# =============================================================================

class BallastController:
    """
    Resource state machine for the ballast tanks, air and electricity.

    The controller holds only its rates; the BallastState it updates is
    passed in each tick by its owner.

    Usage:
        controller = BallastController()
        state = BallastState()
        controller.update(state, depth=0.0, dt=0.016, toggle_vents=True)
    """

    def __init__(self, config: Optional[BallastConfig] = None) -> None:
        self.config = config or BallastConfig()

    # -------------------------------------------------------------------------
    # Toggles
    # -------------------------------------------------------------------------

    @staticmethod
    def toggle_vents(state: BallastState) -> List[BallastTransition]:
        """Flip the vents; opening them closes the air valve."""
        transitions = []
        state.vents_open = not state.vents_open
        if state.vents_open:
            transitions.append(BallastTransition.VENTS_OPENED)
            if state.air_valve_open:
                state.air_valve_open = False
                transitions.append(BallastTransition.AIR_VALVE_CLOSED)
        else:
            transitions.append(BallastTransition.VENTS_CLOSED)
        return transitions

    @staticmethod
    def toggle_air_valve(state: BallastState) -> List[BallastTransition]:
        """Flip the air valve; opening it closes the vents."""
        transitions = []
        state.air_valve_open = not state.air_valve_open
        if state.air_valve_open:
            transitions.append(BallastTransition.AIR_VALVE_OPENED)
            if state.vents_open:
                state.vents_open = False
                transitions.append(BallastTransition.VENTS_CLOSED)
        else:
            transitions.append(BallastTransition.AIR_VALVE_CLOSED)
        return transitions

    @staticmethod
    def toggle_compressor(state: BallastState, depth: float) -> List[BallastTransition]:
        """Flip the compressor at the surface; below it the request turns it off."""
        if depth <= 0.0:
            state.compressor_on = not state.compressor_on
            if state.compressor_on:
                return [BallastTransition.COMPRESSOR_STARTED]
            return [BallastTransition.COMPRESSOR_STOPPED]

        if state.compressor_on:
            state.compressor_on = False
            return [BallastTransition.COMPRESSOR_FORCED_OFF]
        return []

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def update(
        self,
        state: BallastState,
        depth: float,
        dt: float,
        toggle_vents: bool = False,
        toggle_air_valve: bool = False,
        toggle_compressor: bool = False
    ) -> List[BallastTransition]:
        """
        Advance the ballast resources by one tick.

        Args:
            state: Ballast state to update in place.
            depth: Vehicle depth below the surface (<= 0 at/above it).
            dt: Time step in seconds.
            toggle_vents: Vent toggle requested this tick.
            toggle_air_valve: Air valve toggle requested this tick.
            toggle_compressor: Compressor toggle requested this tick.

        Returns:
            Transitions that happened during this tick.
        """
        cfg = self.config
        dt = max(0.0, dt)
        transitions: List[BallastTransition] = []

        was_full = state.fill_level >= MAX_FILL_LEVEL
        was_empty = state.fill_level <= 0.0
        had_air = state.compressed_air > 0.0
        had_power = state.electricity > 0.0

        # 1. Toggle requests
        if toggle_vents:
            transitions.extend(self.toggle_vents(state))
        if toggle_air_valve:
            transitions.extend(self.toggle_air_valve(state))
        if toggle_compressor:
            transitions.extend(self.toggle_compressor(state, depth))

        # 2. Compressor (surface only)
        if state.compressor_on and state.electricity > 0.0 and depth <= 0.0:
            state.compressed_air = min(
                MAX_COMPRESSED_AIR,
                state.compressed_air + cfg.air_rate * dt
            )
            state.electricity = max(
                0.0,
                state.electricity - cfg.compressor_drain * dt
            )
        elif depth > 0.0 and state.compressor_on:
            state.compressor_on = False
            transitions.append(BallastTransition.COMPRESSOR_FORCED_OFF)

        # 3. Recharge while idle
        if not state.compressor_on:
            state.electricity = min(
                MAX_ELECTRICITY,
                state.electricity + cfg.recharge_rate * dt
            )

        # 4. Water/air transfer
        if state.vents_open:
            state.fill_level = min(
                MAX_FILL_LEVEL,
                state.fill_level + cfg.fill_rate * dt
            )
        elif state.air_valve_open and state.compressed_air > 0.0:
            drained = cfg.drain_rate * dt
            state.fill_level = max(0.0, state.fill_level - drained)
            state.compressed_air = max(
                0.0,
                state.compressed_air - drained * cfg.air_per_drain
            )
            if state.fill_level <= 0.0:
                state.air_valve_open = False
                transitions.append(BallastTransition.AIR_VALVE_AUTO_CLOSED)

        if not was_full and state.fill_level >= MAX_FILL_LEVEL:
            transitions.append(BallastTransition.TANKS_FULL)
        if not was_empty and state.fill_level <= 0.0:
            transitions.append(BallastTransition.TANKS_EMPTY)
        if had_air and state.compressed_air <= 0.0:
            transitions.append(BallastTransition.AIR_EXHAUSTED)
        if had_power and state.electricity <= 0.0:
            transitions.append(BallastTransition.ELECTRICITY_DEPLETED)

        return transitions


# =============================================================================
# INTEGRATION HELPERS
# =============================================================================

def time_to_fill(state: BallastState, config: Optional[BallastConfig] = None) -> float:
    """
    Seconds until the tanks are full with the vents open.

    Args:
        state: Current ballast state.
        config: Controller rates (defaults used if omitted).

    Returns:
        Time in seconds, or infinity if the fill rate is zero.
    """
    cfg = config or BallastConfig()
    if cfg.fill_rate <= 0:
        return float('inf')
    return (MAX_FILL_LEVEL - state.fill_level) / cfg.fill_rate


def time_to_blow(state: BallastState, config: Optional[BallastConfig] = None) -> float:
    """
    Seconds until the tanks are empty with the air valve open.

    Limited by whichever runs out first, water or compressed air.

    Args:
        state: Current ballast state.
        config: Controller rates (defaults used if omitted).

    Returns:
        Time in seconds, or infinity if the tanks can never be emptied.
    """
    cfg = config or BallastConfig()
    if cfg.drain_rate <= 0:
        return float('inf')
    water_time = state.fill_level / cfg.drain_rate
    air_use_rate = cfg.drain_rate * cfg.air_per_drain
    if air_use_rate <= 0:
        return water_time
    air_time = state.compressed_air / air_use_rate
    if air_time < water_time:
        return float('inf')
    return water_time
