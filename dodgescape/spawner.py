"""
Spawn Director
===============
Decides each frame whether to release an ordinary arrow and whether to
start a telegraphed pattern.

The ordinary trickle speeds up linearly with survival time until it hits
its floor. Patterns are gated by their own timer and by the context's
``pattern_active`` flag, so two patterns never overlap.
"""

import math
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, TYPE_CHECKING

from .config import GameConfig
from .components import Position
from .projectiles import spawn_homing_arrow

if TYPE_CHECKING:
    from .patterns import PatternEngine
    from .session import SimulationContext


logger = logging.getLogger(__name__)

# Edge indices, clockwise from the top
EDGE_TOP = 0
EDGE_RIGHT = 1
EDGE_BOTTOM = 2
EDGE_LEFT = 3


def spawn_interval_ms(sim_time: float, config: GameConfig) -> float:
    """Milliseconds between ordinary arrows at a given survival time."""
    return max(
        config.spawn_interval_min_ms,
        config.spawn_interval_start_ms - sim_time * config.spawn_interval_decay_ms,
    )


def edge_spawn_point(edge: int, along: float, width: float, height: float,
                     offset: float) -> Tuple[float, float]:
    """
    Point ``offset`` units outside an edge.

    ``along`` is a fraction in [0, 1) of that edge's length.
    """
    if edge == EDGE_TOP:
        return along * width, -offset
    if edge == EDGE_RIGHT:
        return width + offset, along * height
    if edge == EDGE_BOTTOM:
        return along * width, height + offset
    return -offset, along * height


def spawn_edge_arrow(ctx: 'SimulationContext') -> int:
    """Spawn an ordinary arrow just outside a random edge, aimed at the player."""
    config = ctx.config
    width, height = ctx.bounds
    size = config.arrow_size

    edge = ctx.rng.randrange(4)
    x, y = edge_spawn_point(edge, ctx.rng.random(), width, height, size)

    target = None
    if ctx.player_id is not None:
        target = ctx.world.get_component(ctx.player_id, Position)
    tx, ty = (target.x, target.y) if target else (width / 2, height / 2)
    angle = math.atan2(ty - y, tx - x)

    return spawn_homing_arrow(
        ctx.world, x, y,
        math.cos(angle) * config.arrow_speed,
        math.sin(angle) * config.arrow_speed,
        created_at=ctx.clock.elapsed,
        size=size,
        turn_rate=config.arrow_turn_rate,
    )


@dataclass
class TickResult:
    """What one director tick decided."""
    spawned: Optional[int] = None   # Entity ID of the ordinary arrow
    pattern: Optional[str] = None   # Name of the pattern that started


class SpawnDirector:
    """Owns the spawning policy; all mutable timers live on the context."""

    def __init__(self, patterns: 'PatternEngine'):
        self.patterns = patterns

    def tick(self, ctx: 'SimulationContext', delta_ms: float) -> TickResult:
        result = TickResult()
        sim_time = ctx.clock.elapsed

        ctx.since_spawn_ms += delta_ms
        if ctx.since_spawn_ms > spawn_interval_ms(sim_time, ctx.config):
            result.spawned = spawn_edge_arrow(ctx)
            ctx.since_spawn_ms = 0.0
            logger.debug('Arrow %d spawned at t=%.2f', result.spawned, sim_time)

        # The pattern timer keeps running while a pattern is active, so the
        # next one fires on the first frame after the flag clears.
        ctx.since_pattern_ms += delta_ms
        if ctx.since_pattern_ms > ctx.config.pattern_interval_ms and not ctx.pattern_active:
            ctx.since_pattern_ms = 0.0
            result.pattern = self.patterns.trigger(ctx)

        return result
