"""
Component Definitions
======================
All components are plain dataclasses with no behavior.
"""

from dataclasses import dataclass


# =============================================================================
# PHYSICS COMPONENTS
# =============================================================================

@dataclass
class Position:
    """World position in play-area units."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class Velocity:
    """Movement velocity in units per frame."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class Friction:
    """Friction multiplier applied to velocity each frame."""
    value: float = 0.95


@dataclass
class MaxSpeed:
    """Maximum speed cap in units per frame."""
    value: float = 5.5


@dataclass
class CircleCollider:
    """Collision circle centred on Position."""
    radius: float = 15.0


# =============================================================================
# RENDERING COMPONENTS
# =============================================================================

@dataclass
class Renderable:
    """Visual representation of an entity."""
    char: str = '?'
    color: int = 7  # ANSI 256 color


# =============================================================================
# PLAYER COMPONENTS
# =============================================================================

@dataclass
class PlayerControlled:
    """Marks an entity as player-controlled."""
    acceleration: float = 0.5


@dataclass
class PlayerTag:
    """Marks the player entity."""
    pass


# =============================================================================
# PROJECTILE COMPONENTS
# =============================================================================
# Every arrow carries Arrow plus exactly one variant component:
# Homing (ordinary arrows) or PatternTag (choreographed batch arrows).

@dataclass
class Arrow:
    """Arrow body shared by both variants."""
    size: float = 20.0
    angle: float = 0.0  # Heading in radians, kept equal to atan2(vy, vx)
    color: int = 203


@dataclass
class Homing:
    """Ordinary arrow: steers toward the player and expires."""
    turn_rate: float = 0.03  # Radians per frame
    created_at: float = 0.0  # Simulation seconds


@dataclass
class PatternTag:
    """Pattern arrow: constant velocity, no steering, no lifetime."""
    pass


# =============================================================================
# TELEGRAPH COMPONENTS
# =============================================================================

@dataclass
class WarningZone:
    """Axis-aligned warning rectangle shown before a pattern fires."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    end_time: float = 0.0  # Simulation seconds
