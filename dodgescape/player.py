"""
Player Module
==============
Player entity creation and input handling.
"""

from enum import Enum
from typing import Iterable, Set

from .ecs import World
from .components import (
    Position, Velocity, Friction, MaxSpeed, CircleCollider,
    Renderable, PlayerControlled, PlayerTag
)
from .config import GameConfig


PLAYER_COLOR = 87  # Pale cyan


class Direction(Enum):
    """Logical movement directions."""
    UP = 'up'
    DOWN = 'down'
    LEFT = 'left'
    RIGHT = 'right'


KEY_DIRECTIONS = {
    'w': Direction.UP,
    's': Direction.DOWN,
    'a': Direction.LEFT,
    'd': Direction.RIGHT,
    'KEY_UP': Direction.UP,
    'KEY_DOWN': Direction.DOWN,
    'KEY_LEFT': Direction.LEFT,
    'KEY_RIGHT': Direction.RIGHT,
}


def create_player(world: World, x: float, y: float, config: GameConfig) -> int:
    """Create the player entity with all required components."""
    return world.create_entity(
        Position(x, y),
        Velocity(0.0, 0.0),
        Friction(config.player_friction),
        MaxSpeed(config.player_max_speed),
        CircleCollider(config.player_radius),
        PlayerControlled(acceleration=config.player_acceleration),
        Renderable(char='@', color=PLAYER_COLOR),
        PlayerTag(),
    )


class InputHandler:
    """
    Handles player input with key hold detection.

    Terminals report key presses (and auto-repeat) but no key releases, so
    each press keeps its direction held for a few frames.
    """

    def __init__(self, hold_duration: int = 12):
        self.keys_held: dict = {}  # Direction -> frames remaining
        self.hold_duration = hold_duration

        # Actions triggered since last read (consumed on read)
        self._pause_triggered = False
        self._restart_triggered = False
        self._quit_triggered = False
        self._any_key = False

    def process_key(self, key) -> None:
        """Process a single key press from blessed's inkey()."""
        if key is None or not key:
            return

        self._any_key = True
        key_str = key.lower() if not key.is_sequence else ''

        if key_str == 'q' or key.name == 'KEY_ESCAPE':
            self._quit_triggered = True
            return

        direction = KEY_DIRECTIONS.get(key_str) or KEY_DIRECTIONS.get(key.name or '')
        if direction is not None:
            self.keys_held[direction] = self.hold_duration
        elif key_str == 'p':
            self._pause_triggered = True
        elif key_str == 'r':
            self._restart_triggered = True

    def update(self) -> None:
        """Update key hold timers (call once per frame)."""
        expired = []
        for direction, frames in self.keys_held.items():
            self.keys_held[direction] = frames - 1
            if self.keys_held[direction] <= 0:
                expired.append(direction)
        for direction in expired:
            del self.keys_held[direction]

    def pressed_directions(self) -> Set[Direction]:
        return set(self.keys_held)

    def release_all(self) -> None:
        self.keys_held.clear()

    def consume_pause(self) -> bool:
        triggered = self._pause_triggered
        self._pause_triggered = False
        return triggered

    def consume_restart(self) -> bool:
        triggered = self._restart_triggered
        self._restart_triggered = False
        return triggered

    def consume_quit(self) -> bool:
        triggered = self._quit_triggered
        self._quit_triggered = False
        return triggered

    def consume_any_key(self) -> bool:
        triggered = self._any_key
        self._any_key = False
        return triggered


def player_input_system(world: World, directions: Iterable[Direction]) -> None:
    """
    Add acceleration for every pressed direction.

    Acceleration accumulates frame over frame. Opposite directions cancel;
    diagonals are not normalised (the speed clamp handles them).
    """
    directions = set(directions)
    for entity_id, vel, ctrl in world.query(Velocity, PlayerControlled):
        if Direction.UP in directions:
            vel.y -= ctrl.acceleration
        if Direction.DOWN in directions:
            vel.y += ctrl.acceleration
        if Direction.LEFT in directions:
            vel.x -= ctrl.acceleration
        if Direction.RIGHT in directions:
            vel.x += ctrl.acceleration
