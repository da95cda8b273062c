"""
Projectile System
==================
Arrow lifecycle: spawn, steer, move, collide, cull.
"""

import math
import logging
from typing import Optional

from .ecs import World
from .components import (
    Position, Velocity, CircleCollider,
    Arrow, Homing, PatternTag, PlayerTag
)
from .systems import angle_to, circles_overlap, wrap_angle


logger = logging.getLogger(__name__)

ARROW_COLOR = 203     # Soft red, ordinary arrows
BARRAGE_COLOR = 220   # Gold
CROSS_COLOR = 153     # Light blue


def spawn_homing_arrow(
    world: World,
    x: float, y: float,
    vx: float, vy: float,
    created_at: float,
    size: float = 20.0,
    turn_rate: float = 0.03,
    color: int = ARROW_COLOR,
) -> int:
    """Spawn an ordinary arrow that steers toward the player."""
    return world.create_entity(
        Position(x, y),
        Velocity(vx, vy),
        Arrow(size=size, angle=math.atan2(vy, vx), color=color),
        Homing(turn_rate=turn_rate, created_at=created_at),
    )


def spawn_pattern_arrow(
    world: World,
    x: float, y: float,
    vx: float, vy: float,
    size: float = 20.0,
    color: int = BARRAGE_COLOR,
) -> int:
    """Spawn a constant-velocity arrow belonging to a pattern batch."""
    return world.create_entity(
        Position(x, y),
        Velocity(vx, vy),
        Arrow(size=size, angle=math.atan2(vy, vx), color=color),
        PatternTag(),
    )


def steer_toward(pos: Position, vel: Velocity, arrow: Arrow,
                 turn_rate: float, target_x: float, target_y: float) -> float:
    """
    Rotate the arrow's heading toward a target by at most turn_rate radians.

    Speed is preserved. Returns the signed rotation applied this frame.
    """
    target_angle = angle_to(pos.x, pos.y, target_x, target_y)
    current_angle = math.atan2(vel.y, vel.x)

    diff = wrap_angle(target_angle - current_angle)
    turn = math.copysign(min(turn_rate, abs(diff)), diff)
    current_angle += turn

    speed = math.sqrt(vel.x * vel.x + vel.y * vel.y)
    vel.x = math.cos(current_angle) * speed
    vel.y = math.sin(current_angle) * speed
    arrow.angle = current_angle
    return turn


def arrow_hits_player(pos: Position, arrow: Arrow,
                      player_pos: Position, player_radius: float) -> bool:
    """The arrow's collision radius is a third of its size."""
    return circles_overlap(
        pos.x, pos.y, arrow.size / 3,
        player_pos.x, player_pos.y, player_radius
    )


def is_out_of_bounds(pos: Position, width: float, height: float,
                     margin: float) -> bool:
    return (
        pos.x < -margin or pos.x > width + margin or
        pos.y < -margin or pos.y > height + margin
    )


def projectile_system(world: World, sim_time: float,
                      width: float, height: float,
                      lifetime: float = 5.0, margin: float = 20.0) -> Optional[int]:
    """
    Move every arrow, test it against the player, cull the dead ones.

    Arrows are visited newest first. The sweep stops at the first arrow
    that hits the player and returns its ID; arrows after it are left
    untouched this frame. Returns None when nothing hit.

    Removal is deferred to ``World.process_dead_entities``.
    """
    player_pos = None
    player_radius = 0.0
    for pid, p_pos, collider, _ in world.query(Position, CircleCollider, PlayerTag):
        player_pos = p_pos
        player_radius = collider.radius
        break

    for eid in reversed(world.entity_ids(Position, Velocity, Arrow)):
        if not world.is_alive(eid):
            continue
        pos = world.get_component(eid, Position)
        vel = world.get_component(eid, Velocity)
        arrow = world.get_component(eid, Arrow)
        homing = world.get_component(eid, Homing)

        if homing is not None and player_pos is not None:
            steer_toward(pos, vel, arrow, homing.turn_rate, player_pos.x, player_pos.y)

        pos.x += vel.x
        pos.y += vel.y

        if player_pos is not None and arrow_hits_player(pos, arrow, player_pos, player_radius):
            logger.debug('Arrow %d hit the player at (%.1f, %.1f)', eid, pos.x, pos.y)
            return eid

        if homing is not None and sim_time - homing.created_at > lifetime:
            world.destroy_entity(eid)
            continue

        if is_out_of_bounds(pos, width, height, margin):
            world.destroy_entity(eid)

    return None
