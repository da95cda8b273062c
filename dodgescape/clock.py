"""
Simulation Clock
=================
Turns wall-clock frame deltas into simulation time.

Simulation time only advances while a session is running. Frame deltas
that are negative or not finite are treated as zero elapsed time.
"""

import logging
import math
from typing import Optional


logger = logging.getLogger(__name__)


def sanitize_delta(delta_ms: float) -> float:
    """Clamp a frame delta to a finite, non-negative number of milliseconds."""
    if not math.isfinite(delta_ms) or delta_ms < 0:
        logger.debug('Ignoring invalid frame delta %r', delta_ms)
        return 0.0
    return delta_ms


class SimulationClock:
    """Accumulated survival time in seconds."""

    def __init__(self):
        self.elapsed: float = 0.0

    def advance(self, delta_ms: float) -> float:
        """Add a frame delta. Returns the delta actually applied, in ms."""
        delta_ms = sanitize_delta(delta_ms)
        if delta_ms > 0:
            self.elapsed += delta_ms / 1000.0
        return delta_ms

    def reset(self) -> None:
        self.elapsed = 0.0


class FrameTimer:
    """
    Wall-clock reference point for per-frame deltas.

    ``reset(now)`` moves the reference without producing a delta, which is
    how un-pausing avoids feeding the whole pause into the simulation.
    """

    def __init__(self, now_ms: Optional[float] = None):
        self.last_ms: Optional[float] = now_ms

    def reset(self, now_ms: float) -> None:
        self.last_ms = now_ms

    def tick(self, now_ms: float) -> float:
        """Return the sanitized delta since the previous tick and move on."""
        if self.last_ms is None:
            self.last_ms = now_ms
            return 0.0
        delta_ms = now_ms - self.last_ms
        self.last_ms = now_ms
        return sanitize_delta(delta_ms)
