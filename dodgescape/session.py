"""
Session State Machine
======================
IDLE -> COUNTDOWN -> RUNNING <-> PAUSED -> OVER, and OVER -> COUNTDOWN on
restart.

All per-session simulation state lives on a ``SimulationContext`` that is
rebuilt from scratch when a countdown ends. The ``Session`` owns the
context, the scheduler for deferred pattern commits and the best score,
and is driven entirely by the wall-clock milliseconds its caller passes in.
"""

import random
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Iterable, List, Optional, Tuple

from .ecs import World
from .clock import SimulationClock, FrameTimer
from .components import Position, Velocity, CircleCollider, Renderable, Arrow, Homing
from .config import GameConfig
from .patterns import PatternEngine
from .player import Direction, create_player, player_input_system
from .projectiles import projectile_system
from .scheduler import Scheduler, SessionToken
from .spawner import SpawnDirector
from .systems import (
    player_physics_system, boundary_system, warning_system, active_warnings
)


logger = logging.getLogger(__name__)

BoundsProvider = Callable[[], Tuple[float, float]]


class SessionStatus(Enum):
    IDLE = auto()
    COUNTDOWN = auto()
    RUNNING = auto()
    PAUSED = auto()
    OVER = auto()


# Event kinds published to subscribers
EVENT_COUNTDOWN = 'countdown'   # value: 3, 2, 1, then 'GO'
EVENT_STARTED = 'started'
EVENT_PAUSED = 'paused'
EVENT_RESUMED = 'resumed'
EVENT_GAME_OVER = 'game_over'   # value: GameOverInfo

COUNTDOWN_GO = 'GO'


@dataclass
class SessionEvent:
    kind: str
    value: Any = None


@dataclass
class GameOverInfo:
    score: float
    best_score: float
    new_best: bool


# =============================================================================
# SIMULATION CONTEXT
# =============================================================================

@dataclass
class SimulationContext:
    """Everything one running session mutates. Passed to every subsystem."""
    config: GameConfig
    rng: random.Random
    token: SessionToken
    bounds: Tuple[float, float]
    world: World = field(default_factory=World)
    clock: SimulationClock = field(default_factory=SimulationClock)
    player_id: Optional[int] = None
    now_ms: float = 0.0
    since_spawn_ms: float = 0.0
    since_pattern_ms: float = 0.0
    pattern_active: bool = False


def new_context(config: GameConfig, rng: random.Random, token: SessionToken,
                bounds: Tuple[float, float], now_ms: float = 0.0) -> SimulationContext:
    """Fresh context with the player in the centre of the play area."""
    ctx = SimulationContext(config=config, rng=rng, token=token,
                            bounds=bounds, now_ms=now_ms)
    width, height = bounds
    ctx.player_id = create_player(ctx.world, width / 2, height / 2, config)
    return ctx


# =============================================================================
# SNAPSHOTS
# =============================================================================

@dataclass
class PlayerView:
    x: float
    y: float
    radius: float
    char: str = '@'
    color: int = 7


@dataclass
class ArrowView:
    x: float
    y: float
    size: float
    angle: float
    homing: bool
    color: int


@dataclass
class WarningView:
    x: float
    y: float
    width: float
    height: float


@dataclass
class FrameSnapshot:
    """What a renderer needs to draw one frame."""
    status: SessionStatus
    bounds: Tuple[float, float]
    elapsed: float = 0.0
    best_score: float = 0.0
    countdown: Any = None
    player: Optional[PlayerView] = None
    arrows: List[ArrowView] = field(default_factory=list)
    warnings: List[WarningView] = field(default_factory=list)
    game_over: Optional[GameOverInfo] = None


# =============================================================================
# SESSION
# =============================================================================

class Session:
    """Session controller. Every method takes the current wall-clock time."""

    def __init__(self, config: GameConfig, bounds: BoundsProvider,
                 score_store, rng: Optional[random.Random] = None):
        self.config = config
        self.bounds_provider = bounds
        self.score_store = score_store
        self.rng = rng or random.Random()

        self.scheduler = Scheduler()
        self.patterns = PatternEngine(self.scheduler)
        self.director = SpawnDirector(self.patterns)
        self.timer = FrameTimer()

        self.status = SessionStatus.IDLE
        self.ctx: Optional[SimulationContext] = None
        self.best_score: float = score_store.load()
        self.game_over: Optional[GameOverInfo] = None

        self._listeners: List[Callable[[SessionEvent], None]] = []
        self._session_count = 0
        self._token: Optional[SessionToken] = None
        self._countdown_value: Any = None
        self._next_countdown_ms = 0.0
        self._paused_at_ms = 0.0

    # -- events ---------------------------------------------------------------

    def subscribe(self, callback: Callable[[SessionEvent], None]) -> None:
        self._listeners.append(callback)

    def _emit(self, kind: str, value: Any = None) -> None:
        event = SessionEvent(kind, value)
        for callback in self._listeners:
            callback(event)

    # -- actions --------------------------------------------------------------

    def start(self, now_ms: float) -> bool:
        """First input from the title screen: begin the countdown."""
        if self.status is not SessionStatus.IDLE:
            logger.debug('start ignored in %s', self.status.name)
            return False
        self._begin_countdown(now_ms)
        return True

    def toggle_pause(self, now_ms: float) -> bool:
        """Pause a running session or resume a paused one."""
        if self.status is SessionStatus.RUNNING:
            self.status = SessionStatus.PAUSED
            self._paused_at_ms = now_ms
            logger.info('Paused at t=%.2f', self.ctx.clock.elapsed)
            self._emit(EVENT_PAUSED)
            return True
        if self.status is SessionStatus.PAUSED:
            # Pending commits keep their distance from the warnings they follow
            self.scheduler.postpone(now_ms - self._paused_at_ms)
            self.timer.reset(now_ms)
            self.status = SessionStatus.RUNNING
            logger.info('Resumed at t=%.2f', self.ctx.clock.elapsed)
            self._emit(EVENT_RESUMED)
            return True
        logger.debug('pause toggle ignored in %s', self.status.name)
        return False

    def restart(self, now_ms: float) -> bool:
        """Discard the finished session and count down into a new one."""
        if self.status is not SessionStatus.OVER:
            logger.debug('restart ignored in %s', self.status.name)
            return False
        self._discard_session()
        self._begin_countdown(now_ms)
        return True

    # -- frame ----------------------------------------------------------------

    def update(self, now_ms: float, directions: Iterable[Direction] = ()) -> None:
        """Advance whatever the current state advances. Call once per frame."""
        if self.status is SessionStatus.COUNTDOWN:
            self._advance_countdown(now_ms)
        elif self.status is SessionStatus.RUNNING:
            self._run_frame(now_ms, directions)

    def _begin_countdown(self, now_ms: float) -> None:
        self.status = SessionStatus.COUNTDOWN
        self._countdown_value = self.config.countdown_from
        self._next_countdown_ms = now_ms + self.config.countdown_tick_ms
        logger.info('Countdown started')
        self._emit(EVENT_COUNTDOWN, self._countdown_value)

    def _advance_countdown(self, now_ms: float) -> None:
        while self.status is SessionStatus.COUNTDOWN and now_ms >= self._next_countdown_ms:
            self._next_countdown_ms += self.config.countdown_tick_ms
            if self._countdown_value == COUNTDOWN_GO:
                self._start_running(now_ms)
                return
            self._countdown_value -= 1
            if self._countdown_value <= 0:
                self._countdown_value = COUNTDOWN_GO
            self._emit(EVENT_COUNTDOWN, self._countdown_value)

    def _start_running(self, now_ms: float) -> None:
        self._discard_session()
        self._session_count += 1
        self._token = SessionToken(self._session_count)
        self.ctx = new_context(self.config, self.rng, self._token,
                               self._read_bounds(), now_ms)
        self.game_over = None
        self._countdown_value = None
        self.timer.reset(now_ms)
        self.status = SessionStatus.RUNNING
        logger.info('Session %d running, best=%.2f', self._session_count, self.best_score)
        self._emit(EVENT_STARTED)

    def _run_frame(self, now_ms: float, directions: Iterable[Direction]) -> None:
        ctx = self.ctx
        config = self.config
        world = ctx.world

        delta_ms = self.timer.tick(now_ms)
        ctx.now_ms = now_ms
        ctx.bounds = self._read_bounds()
        width, height = ctx.bounds

        # Deferred pattern commits
        self.scheduler.run_due(now_ms)

        warning_system(world, ctx.clock.elapsed)

        # Player
        player_input_system(world, directions)
        player_physics_system(world)
        boundary_system(world, width, height, config.wall_restitution)

        # Spawning
        self.director.tick(ctx, delta_ms)

        # Arrows
        hit = projectile_system(
            world, ctx.clock.elapsed, width, height,
            lifetime=config.arrow_lifetime, margin=config.cull_margin
        )

        world.process_dead_entities()

        # The fatal frame does not count toward the score
        if hit is not None:
            self._end_session()
            return
        ctx.clock.advance(delta_ms)

    def _end_session(self) -> None:
        elapsed = self.ctx.clock.elapsed
        score = round(elapsed, 2)
        new_best = elapsed > self.best_score
        if new_best:
            self.best_score = score
            self.score_store.save(score)

        self.game_over = GameOverInfo(score=score, best_score=self.best_score,
                                      new_best=new_best)
        self.status = SessionStatus.OVER
        if self._token is not None:
            self._token.cancel()
        logger.info('Game over: survived %.2fs (best %.2f, new best: %s)',
                    score, self.best_score, new_best)
        self._emit(EVENT_GAME_OVER, self.game_over)

    def _discard_session(self) -> None:
        if self._token is not None:
            self._token.cancel()
        self.scheduler.clear()
        self.ctx = None

    def _read_bounds(self) -> Tuple[float, float]:
        width, height = self.bounds_provider()
        return float(width), float(height)

    # -- queries --------------------------------------------------------------

    @property
    def elapsed(self) -> float:
        return self.ctx.clock.elapsed if self.ctx else 0.0

    @property
    def countdown_value(self) -> Any:
        return self._countdown_value

    def snapshot(self) -> FrameSnapshot:
        snap = FrameSnapshot(
            status=self.status,
            bounds=self.ctx.bounds if self.ctx else self._read_bounds(),
            elapsed=self.elapsed,
            best_score=self.best_score,
            countdown=self._countdown_value,
            game_over=self.game_over,
        )
        if self.ctx is None:
            return snap

        world = self.ctx.world
        pid = self.ctx.player_id
        if pid is not None and world.is_alive(pid):
            pos = world.get_component(pid, Position)
            collider = world.get_component(pid, CircleCollider)
            look = world.get_component(pid, Renderable)
            snap.player = PlayerView(pos.x, pos.y, collider.radius, look.char, look.color)
        for eid, pos, _, arrow in world.query(Position, Velocity, Arrow):
            snap.arrows.append(ArrowView(
                pos.x, pos.y, arrow.size, arrow.angle,
                homing=world.has_component(eid, Homing),
                color=arrow.color,
            ))
        snap.warnings = [
            WarningView(w.x, w.y, w.width, w.height)
            for w in active_warnings(world)
        ]
        return snap
