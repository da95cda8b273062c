"""Pytest configuration and fixtures for dodgescape tests."""

import random

import pytest

from dodgescape.config import GameConfig
from dodgescape.scheduler import SessionToken
from dodgescape.scores import MemoryScoreStore
from dodgescape.session import Session, new_context


PLAY_AREA = (800.0, 600.0)


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def config():
    return GameConfig()


@pytest.fixture
def context(config, seeded_rng):
    """A fresh simulation context on an 800x600 play area."""
    return new_context(config, seeded_rng, SessionToken(1), PLAY_AREA, now_ms=0.0)


@pytest.fixture
def score_store():
    return MemoryScoreStore()


@pytest.fixture
def session(config, seeded_rng, score_store):
    """A session in IDLE with a fixed play area."""
    return Session(config, lambda: PLAY_AREA, score_store, seeded_rng)


def run_countdown(session, start_ms=0.0):
    """Drive a session from IDLE to RUNNING. Returns the time it started."""
    session.start(start_ms)
    ticks = session.config.countdown_from + 1
    t = start_ms
    for _ in range(ticks):
        t += session.config.countdown_tick_ms
        session.update(t)
    return t


@pytest.fixture
def countdown():
    return run_countdown


@pytest.fixture
def running_session(session):
    """A session that has just entered RUNNING at t=4000ms."""
    run_countdown(session)
    return session
