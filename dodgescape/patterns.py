"""
Pattern Engine
===============
Telegraphed arrow patterns.

Every pattern runs the same two phases:

1. Telegraph: warning rectangles appear, ``pattern_active`` is raised and
   the commit is scheduled one warning-duration of real time later.
2. Commit: the arrow batch spawns and ``pattern_active`` drops.

Patterns:
    barrage - a wall of arrows from one edge with a safe gap in the middle
    cross   - three-wide streams from all four edges through the centre
"""

import logging
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from .components import WarningZone
from .projectiles import spawn_pattern_arrow, BARRAGE_COLOR, CROSS_COLOR
from .scheduler import Scheduler
from .spawner import EDGE_TOP, EDGE_RIGHT, EDGE_BOTTOM

if TYPE_CHECKING:
    from .session import SimulationContext


logger = logging.getLogger(__name__)


# =============================================================================
# LAYOUT HELPERS
# =============================================================================

def barrage_slots(count: int, gap: int) -> List[int]:
    """Slot indices that fire, leaving ``gap`` centred slots empty."""
    start_of_gap = count // 2 - gap // 2
    end_of_gap = start_of_gap + gap
    return [i for i in range(count) if not start_of_gap <= i < end_of_gap]


def cross_offsets(per_side: int, spacing: float) -> List[float]:
    """Offsets from the centre line, one per arrow on each side."""
    return [(i - per_side // 2) * spacing for i in range(per_side)]


def barrage_speed(sim_time: float, config) -> float:
    return config.barrage_speed_base + sim_time * config.barrage_speed_scale


def cross_speed(sim_time: float, config) -> float:
    return config.cross_speed_base + sim_time * config.cross_speed_scale


# =============================================================================
# BATCH SPAWNERS
# =============================================================================

def spawn_barrage(ctx: 'SimulationContext', edge: int, speed: float) -> List[int]:
    """Spawn the barrage wall along one edge, moving straight inward."""
    config = ctx.config
    width, height = ctx.bounds
    size = config.barrage_size
    count = config.barrage_count
    horizontal = edge in (EDGE_TOP, EDGE_BOTTOM)
    length = width if horizontal else height

    spawned = []
    for i in barrage_slots(count, config.barrage_gap):
        along = (length / count) * (i + 0.5)
        if edge == EDGE_TOP:
            x, y, vx, vy = along, -size, 0.0, speed
        elif edge == EDGE_RIGHT:
            x, y, vx, vy = width + size, along, -speed, 0.0
        elif edge == EDGE_BOTTOM:
            x, y, vx, vy = along, height + size, 0.0, -speed
        else:
            x, y, vx, vy = -size, along, speed, 0.0
        spawned.append(spawn_pattern_arrow(
            ctx.world, x, y, vx, vy, size=size, color=BARRAGE_COLOR
        ))
    return spawned


def spawn_cross(ctx: 'SimulationContext', speed: float) -> List[int]:
    """Spawn inward streams from all four edges along the centre lines."""
    config = ctx.config
    width, height = ctx.bounds
    size = config.cross_size
    world = ctx.world

    spawned = []
    for offset in cross_offsets(config.cross_per_side, config.cross_spacing):
        cx = width / 2 + offset
        cy = height / 2 + offset
        spawned.append(spawn_pattern_arrow(world, cx, -size, 0.0, speed, size, CROSS_COLOR))
        spawned.append(spawn_pattern_arrow(world, cx, height + size, 0.0, -speed, size, CROSS_COLOR))
        spawned.append(spawn_pattern_arrow(world, -size, cy, speed, 0.0, size, CROSS_COLOR))
        spawned.append(spawn_pattern_arrow(world, width + size, cy, -speed, 0.0, size, CROSS_COLOR))
    return spawned


# =============================================================================
# ENGINE
# =============================================================================

class PatternEngine:
    """
    Starts patterns and schedules their commits.

    The engine itself is stateless between patterns; the active flag lives on
    the simulation context and the pending commit lives on the scheduler.
    """

    def __init__(self, scheduler: Scheduler):
        self.scheduler = scheduler
        self._telegraphs: Dict[str, Callable[['SimulationContext'], Callable[[], None]]] = {
            'barrage': self._telegraph_barrage,
            'cross': self._telegraph_cross,
        }

    @property
    def names(self) -> List[str]:
        return list(self._telegraphs)

    def trigger(self, ctx: 'SimulationContext', name: Optional[str] = None) -> Optional[str]:
        """
        Begin a pattern (random unless named). Returns its name.

        Does nothing and returns None while another pattern is telegraphing
        or waiting to commit.
        """
        if ctx.pattern_active:
            logger.debug('Pattern trigger ignored: a pattern is already active')
            return None
        if name is None:
            name = ctx.rng.choice(self.names)
        if name not in self._telegraphs:
            raise ValueError(f'Unknown pattern {name!r}; expected one of {self.names}')

        commit = self._telegraphs[name](ctx)
        ctx.pattern_active = True

        def resolve():
            commit()
            ctx.pattern_active = False
            logger.debug('Pattern %s committed at t=%.2f', name, ctx.clock.elapsed)

        self.scheduler.schedule(
            ctx.now_ms + ctx.config.warning_duration_ms, resolve, ctx.token, name
        )
        logger.debug('Pattern %s telegraphed at t=%.2f', name, ctx.clock.elapsed)
        return name

    def _add_warning(self, ctx: 'SimulationContext', x: float, y: float,
                     width: float, height: float) -> int:
        end_time = ctx.clock.elapsed + ctx.config.warning_duration
        return ctx.world.create_entity(WarningZone(x, y, width, height, end_time))

    def _telegraph_barrage(self, ctx: 'SimulationContext') -> Callable[[], None]:
        width, height = ctx.bounds
        depth = ctx.config.warning_depth
        edge = ctx.rng.randrange(4)

        if edge == EDGE_TOP:
            self._add_warning(ctx, 0, 0, width, depth)
        elif edge == EDGE_RIGHT:
            self._add_warning(ctx, width - depth, 0, depth, height)
        elif edge == EDGE_BOTTOM:
            self._add_warning(ctx, 0, height - depth, width, depth)
        else:
            self._add_warning(ctx, 0, 0, depth, height)

        speed = barrage_speed(ctx.clock.elapsed, ctx.config)
        return lambda: spawn_barrage(ctx, edge, speed)

    def _telegraph_cross(self, ctx: 'SimulationContext') -> Callable[[], None]:
        config = ctx.config
        width, height = ctx.bounds
        band = (config.cross_per_side - 1) * config.cross_spacing + config.warning_depth

        self._add_warning(ctx, 0, height / 2 - band / 2, width, band)
        self._add_warning(ctx, width / 2 - band / 2, 0, band, height)

        speed = cross_speed(ctx.clock.elapsed, config)
        return lambda: spawn_cross(ctx, speed)
