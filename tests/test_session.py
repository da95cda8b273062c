"""Tests for the session state machine."""

import pytest

from dodgescape.components import PatternTag
from dodgescape.player import Direction
from dodgescape.projectiles import spawn_pattern_arrow
from dodgescape.scores import MemoryScoreStore
from dodgescape.session import (
    Session, SessionStatus, EVENT_COUNTDOWN, EVENT_STARTED, EVENT_PAUSED,
    EVENT_RESUMED, EVENT_GAME_OVER, COUNTDOWN_GO
)


PLAY_AREA = (800.0, 600.0)


def hit_player(session):
    """Drop a stationary arrow on top of the player."""
    player = session.snapshot().player
    spawn_pattern_arrow(session.ctx.world, player.x, player.y, 0.0, 0.0)


class TestCountdown:

    def test_starts_idle(self, session):
        assert session.status is SessionStatus.IDLE
        assert session.ctx is None
        assert session.elapsed == 0.0

    def test_countdown_events_in_order(self, session, countdown):
        events = []
        session.subscribe(events.append)

        started_at = countdown(session)

        assert [(e.kind, e.value) for e in events] == [
            (EVENT_COUNTDOWN, 3),
            (EVENT_COUNTDOWN, 2),
            (EVENT_COUNTDOWN, 1),
            (EVENT_COUNTDOWN, COUNTDOWN_GO),
            (EVENT_STARTED, None),
        ]
        assert started_at == 4000
        assert session.status is SessionStatus.RUNNING

    def test_countdown_waits_for_each_tick(self, session):
        session.start(0)
        session.update(999)
        assert session.countdown_value == 3
        session.update(1000)
        assert session.countdown_value == 2

    def test_countdown_catches_up_after_long_gap(self, session):
        session.start(0)
        session.update(10_000)
        assert session.status is SessionStatus.RUNNING

    def test_running_session_is_fresh(self, running_session):
        snap = running_session.snapshot()
        assert snap.status is SessionStatus.RUNNING
        assert snap.elapsed == 0.0
        assert snap.arrows == []
        assert snap.warnings == []
        assert (snap.player.x, snap.player.y) == (400, 300)
        assert snap.countdown is None


class TestRunning:

    def test_clock_follows_wall_time(self, running_session):
        running_session.update(4016)
        running_session.update(4032)
        assert running_session.elapsed == pytest.approx(0.032)

    def test_directions_move_the_player(self, running_session):
        running_session.update(4016, {Direction.RIGHT})
        assert running_session.snapshot().player.x > 400

    def test_bounds_are_read_every_frame(self, config, seeded_rng, score_store, countdown):
        area = [800.0, 600.0]
        session = Session(config, lambda: tuple(area), score_store, seeded_rng)
        countdown(session)

        area[:] = [400.0, 300.0]
        session.update(4016)

        assert session.ctx.bounds == (400.0, 300.0)
        player = session.snapshot().player
        assert player.x <= 400 - config.player_radius

    def test_arrows_appear_over_time(self, running_session):
        t = 4000
        for _ in range(120):
            t += 16
            running_session.update(t)
        if running_session.status is SessionStatus.RUNNING:
            assert running_session.snapshot().arrows


class TestPause:

    def test_pause_freezes_clock(self, running_session):
        running_session.update(4100)
        assert running_session.toggle_pause(4100)
        assert running_session.status is SessionStatus.PAUSED

        running_session.update(9000)
        assert running_session.elapsed == pytest.approx(0.1)

    def test_resume_does_not_count_pause_length(self, running_session):
        running_session.update(4100)
        running_session.toggle_pause(4100)
        running_session.toggle_pause(60_000)
        running_session.update(60_016)

        assert running_session.status is SessionStatus.RUNNING
        assert running_session.elapsed == pytest.approx(0.116)

    def test_pause_events(self, running_session):
        events = []
        running_session.subscribe(events.append)
        running_session.toggle_pause(4000)
        running_session.toggle_pause(5000)
        assert [e.kind for e in events] == [EVENT_PAUSED, EVENT_RESUMED]

    def test_pending_commit_waits_out_the_pause(self, running_session):
        session = running_session
        session.patterns.trigger(session.ctx, 'barrage')
        session.update(4500)
        session.toggle_pause(4500)
        session.toggle_pause(10_500)

        session.update(11_000)
        assert session.ctx.world.count(PatternTag) == 0
        assert session.ctx.pattern_active

        session.update(11_600)
        assert session.ctx.world.count(PatternTag) == 11
        assert not session.ctx.pattern_active


class TestGameOver:

    def test_hit_ends_session_and_records_best(self, running_session, score_store):
        events = []
        running_session.subscribe(events.append)
        running_session.update(4500)
        hit_player(running_session)

        running_session.update(4516)

        assert running_session.status is SessionStatus.OVER
        info = running_session.game_over
        assert info.score == pytest.approx(0.5)
        assert info.new_best
        assert running_session.best_score == pytest.approx(0.5)
        assert score_store.best == pytest.approx(0.5)
        assert score_store.saves == 1
        assert events[-1].kind == EVENT_GAME_OVER
        assert events[-1].value is info

    def test_fatal_frame_is_not_scored(self, config, seeded_rng, countdown):
        store = MemoryScoreStore(best=0.51)
        session = Session(config, lambda: PLAY_AREA, store, seeded_rng)
        countdown(session)
        session.update(4500)
        hit_player(session)

        # 0.5 + 0.016 would beat the stored best; 0.5 does not
        session.update(4516)

        assert session.elapsed == pytest.approx(0.5)
        assert session.game_over.score == pytest.approx(0.5)
        assert not session.game_over.new_best
        assert store.saves == 0

    def test_lower_score_keeps_previous_best(self, config, seeded_rng, countdown):
        store = MemoryScoreStore(best=12.5)
        session = Session(config, lambda: PLAY_AREA, store, seeded_rng)
        assert session.best_score == 12.5

        countdown(session)
        session.update(5000)
        hit_player(session)
        session.update(5016)

        assert not session.game_over.new_best
        assert session.game_over.best_score == 12.5
        assert store.saves == 0

    def test_frozen_after_game_over(self, running_session):
        running_session.update(4100)
        hit_player(running_session)
        running_session.update(4116)
        elapsed = running_session.elapsed

        running_session.update(9000)
        assert running_session.elapsed == elapsed

    def test_game_over_cancels_session_token(self, running_session):
        token = running_session.ctx.token
        hit_player(running_session)
        running_session.update(4016)
        assert token.cancelled


class TestRestart:

    def test_restart_counts_down_into_a_fresh_session(self, running_session):
        hit_player(running_session)
        running_session.update(4016)
        old_ctx = running_session.ctx

        assert running_session.restart(5000)
        assert running_session.status is SessionStatus.COUNTDOWN
        assert running_session.ctx is None

        run_countdown_from = 5000
        for i in range(1, 5):
            running_session.update(run_countdown_from + i * 1000)

        assert running_session.status is SessionStatus.RUNNING
        assert running_session.ctx is not old_ctx
        assert running_session.elapsed == 0.0
        assert running_session.game_over is None

    def test_stale_commit_never_reaches_new_session(self, running_session):
        session = running_session
        session.patterns.trigger(session.ctx, 'cross')
        old_token = session.ctx.token
        hit_player(session)
        session.update(4016)

        session.restart(4100)
        for i in range(1, 5):
            session.update(4100 + i * 1000)
        assert session.status is SessionStatus.RUNNING
        assert old_token.cancelled
        assert session.ctx.token is not old_token

        session.update(8200)
        assert session.ctx.world.count(PatternTag) == 0
        assert not session.ctx.pattern_active


class TestInvalidActions:

    def test_actions_outside_their_states_are_ignored(self, session):
        assert not session.toggle_pause(0)
        assert not session.restart(0)
        assert session.start(0)
        assert not session.start(10)
        assert not session.toggle_pause(10)
        assert session.status is SessionStatus.COUNTDOWN

    def test_restart_while_running_is_ignored(self, running_session):
        assert not running_session.restart(5000)
        assert not running_session.start(5000)
        assert running_session.status is SessionStatus.RUNNING

    def test_update_in_idle_does_nothing(self, session):
        session.update(1000)
        assert session.status is SessionStatus.IDLE
        snap = session.snapshot()
        assert snap.bounds == PLAY_AREA
        assert snap.player is None
