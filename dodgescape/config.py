"""
Game Configuration
===================
Every tuning constant of the simulation, plus the command line that
selects seed, score file and logging.

Distances are play-area units, speeds are units per frame, durations are
seconds unless the name says ``_ms``.
"""

import argparse
import os
from dataclasses import dataclass
from typing import List, Optional


DEFAULT_SCORES_PATH = os.path.join('~', '.dodgescape', 'highscore.json')


@dataclass
class GameConfig:
    """Tuning constants. One instance is shared by every subsystem."""

    # Player
    player_radius: float = 15.0
    player_acceleration: float = 0.5
    player_friction: float = 0.95
    player_max_speed: float = 5.5
    wall_restitution: float = 0.5

    # Ordinary (homing) arrows
    arrow_size: float = 20.0
    arrow_speed: float = 2.0
    arrow_turn_rate: float = 0.03
    arrow_lifetime: float = 5.0
    cull_margin: float = 20.0

    # Spawn director
    spawn_interval_start_ms: float = 800.0
    spawn_interval_decay_ms: float = 10.0  # per simulated second
    spawn_interval_min_ms: float = 100.0
    pattern_interval_ms: float = 10000.0

    # Patterns
    warning_duration: float = 1.5
    warning_depth: float = 40.0
    barrage_count: int = 15
    barrage_gap: int = 4
    barrage_size: float = 18.0
    barrage_speed_base: float = 3.0
    barrage_speed_scale: float = 0.09
    cross_per_side: int = 3
    cross_spacing: float = 40.0
    cross_size: float = 20.0
    cross_speed_base: float = 2.5
    cross_speed_scale: float = 0.13

    # Session
    countdown_from: int = 3
    countdown_tick_ms: float = 1000.0

    # Terminal presentation
    cell_width: float = 10.0   # Units per terminal column
    cell_height: float = 20.0  # Units per terminal row
    target_fps: int = 60

    @property
    def warning_duration_ms(self) -> float:
        return self.warning_duration * 1000.0

    def validate(self) -> 'GameConfig':
        """Raise ValueError on settings the simulation cannot run with."""
        if self.player_radius <= 0:
            raise ValueError(f'player_radius must be positive, got {self.player_radius}')
        if not 0 < self.player_friction < 1:
            raise ValueError(f'player_friction must be in (0, 1), got {self.player_friction}')
        if self.player_max_speed <= 0:
            raise ValueError(f'player_max_speed must be positive, got {self.player_max_speed}')
        if self.spawn_interval_min_ms <= 0:
            raise ValueError('spawn_interval_min_ms must be positive')
        if not 0 <= self.barrage_gap < self.barrage_count:
            raise ValueError(
                f'barrage_gap must leave slots to fire: gap={self.barrage_gap}, '
                f'count={self.barrage_count}'
            )
        if self.cross_per_side < 1:
            raise ValueError('cross_per_side must be at least 1')
        if self.target_fps <= 0:
            raise ValueError(f'target_fps must be positive, got {self.target_fps}')
        return self


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dodgescape',
        description='Survive the arrows for as long as you can.',
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for reproducible spawn patterns',
    )
    parser.add_argument(
        '--scores', default=DEFAULT_SCORES_PATH,
        help='Best-score file (default: %(default)s)',
    )
    parser.add_argument(
        '--no-save', action='store_true',
        help='Keep the best score in memory only',
    )
    parser.add_argument(
        '--log-file', default=None,
        help='Write logs to this file (the terminal is taken by the game)',
    )
    parser.add_argument(
        '--log-level', default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Log level when --log-file is given (default: %(default)s)',
    )
    parser.add_argument(
        '--fps', type=int, default=GameConfig.target_fps,
        help='Target frames per second (default: %(default)s)',
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_arg_parser().parse_args(argv)


def config_from_args(args: argparse.Namespace) -> GameConfig:
    """Build a validated GameConfig from parsed command-line arguments."""
    return GameConfig(target_fps=args.fps).validate()
