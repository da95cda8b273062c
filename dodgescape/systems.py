"""
ECS Systems
============
Functions that operate on entities with matching components.
Each system queries the World for entities with required components
and updates them.
"""

from typing import List, Tuple
import math

from .ecs import World
from .components import (
    Position, Velocity, Friction, MaxSpeed, CircleCollider,
    PlayerControlled, WarningZone
)


# =============================================================================
# GEOMETRY
# =============================================================================

def angle_to(from_x: float, from_y: float, to_x: float, to_y: float) -> float:
    """Bearing in radians from one point to another."""
    return math.atan2(to_y - from_y, to_x - from_x)


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Euclidean distance between two points."""
    return math.hypot(x2 - x1, y2 - y1)


def circles_overlap(x1: float, y1: float, r1: float,
                    x2: float, y2: float, r2: float) -> bool:
    """Strict overlap: circles that exactly touch do not collide."""
    return distance(x1, y1, x2, y2) < r1 + r2


def wrap_angle(angle: float) -> float:
    """Normalize an angle difference to (-pi, pi]."""
    while angle > math.pi:
        angle -= 2 * math.pi
    while angle <= -math.pi:
        angle += 2 * math.pi
    return angle


# =============================================================================
# PHYSICS SYSTEMS
# =============================================================================

def player_physics_system(world: World):
    """
    Clamp speed, apply friction, then integrate position (one step per frame).

    Processes: Position, Velocity, MaxSpeed, Friction, PlayerControlled
    """
    for entity_id, pos, vel, max_speed, friction, _ in world.query(
        Position, Velocity, MaxSpeed, Friction, PlayerControlled
    ):
        speed = math.sqrt(vel.x * vel.x + vel.y * vel.y)
        if speed > max_speed.value:
            vel.x = vel.x / speed * max_speed.value
            vel.y = vel.y / speed * max_speed.value

        vel.x *= friction.value
        vel.y *= friction.value

        pos.x += vel.x
        pos.y += vel.y


def boundary_system(world: World, width: float, height: float,
                    restitution: float = 0.5) -> List[Tuple[int, str]]:
    """
    Keep circular bodies inside the play area with a soft bounce.

    A body crossing an edge is clamped to it and the velocity component on
    that axis is reversed and scaled by ``restitution``. Returns
    (entity_id, edge) pairs for every bounce this frame.
    """
    bounces = []

    for entity_id, pos, vel, collider, _ in world.query(
        Position, Velocity, CircleCollider, PlayerControlled
    ):
        r = collider.radius

        if pos.x - r < 0:
            pos.x = r
            vel.x *= -restitution
            bounces.append((entity_id, 'left'))
        if pos.x + r > width:
            pos.x = width - r
            vel.x *= -restitution
            bounces.append((entity_id, 'right'))
        if pos.y - r < 0:
            pos.y = r
            vel.y *= -restitution
            bounces.append((entity_id, 'top'))
        if pos.y + r > height:
            pos.y = height - r
            vel.y *= -restitution
            bounces.append((entity_id, 'bottom'))

    return bounces


# =============================================================================
# TELEGRAPHS
# =============================================================================

def warning_system(world: World, sim_time: float) -> int:
    """Destroy warnings whose end time has passed. Returns how many."""
    expired = 0
    for eid, warning in world.query(WarningZone):
        if sim_time > warning.end_time:
            world.destroy_entity(eid)
            expired += 1
    return expired


def active_warnings(world: World) -> List[WarningZone]:
    return [warning for _, warning in world.query(WarningZone)]
