"""Tests for arrow steering, collision and the lifecycle sweep."""

import math

import pytest

from dodgescape.components import Position, Velocity, Arrow, Homing, CircleCollider, PlayerTag
from dodgescape.ecs import World
from dodgescape.projectiles import (
    spawn_homing_arrow, spawn_pattern_arrow, steer_toward,
    arrow_hits_player, projectile_system
)


WIDTH, HEIGHT = 800.0, 600.0


def add_player(world, x, y, radius=15.0):
    return world.create_entity(Position(x, y), CircleCollider(radius), PlayerTag())


def heading(vel):
    return math.atan2(vel.y, vel.x)


class TestSteering:

    def test_target_directly_behind_turns_exactly_turn_rate(self):
        pos, vel, arrow = Position(100, 100), Velocity(2, 0), Arrow(angle=0.0)

        turn = steer_toward(pos, vel, arrow, 0.03, 0, 100)

        assert abs(turn) == pytest.approx(0.03)
        assert abs(heading(vel)) == pytest.approx(0.03)

    def test_small_difference_snaps_onto_bearing(self):
        pos, vel, arrow = Position(0, 0), Velocity(2, 0), Arrow()
        target_angle = 0.01

        steer_toward(pos, vel, arrow, 0.03, math.cos(target_angle) * 50,
                     math.sin(target_angle) * 50)

        assert heading(vel) == pytest.approx(target_angle)

    @pytest.mark.parametrize('tx,ty', [
        (100, 0), (0, 100), (-100, 0), (0, -100), (-100, -1), (-100, 1), (5, -300),
    ])
    def test_turn_bounded_for_any_target(self, tx, ty):
        pos, vel, arrow = Position(0, 0), Velocity(2, 0), Arrow()
        before = heading(vel)

        steer_toward(pos, vel, arrow, 0.03, tx, ty)

        change = math.atan2(math.sin(heading(vel) - before), math.cos(heading(vel) - before))
        assert abs(change) <= 0.03 + 1e-12

    def test_speed_preserved_and_angle_tracks_velocity(self):
        pos, vel, arrow = Position(0, 0), Velocity(1.2, -1.6), Arrow()
        for _ in range(50):
            steer_toward(pos, vel, arrow, 0.03, 300, 300)

        assert math.hypot(vel.x, vel.y) == pytest.approx(2.0)
        assert arrow.angle == pytest.approx(heading(vel))

    def test_turns_the_short_way(self):
        # Heading east, target slightly south of west: turn clockwise (positive)
        pos, vel, arrow = Position(0, 0), Velocity(2, 0), Arrow()
        turn = steer_toward(pos, vel, arrow, 0.03, -100, 1)
        assert turn > 0


class TestCollision:

    def test_documented_scenario_hits(self):
        assert arrow_hits_player(Position(110, 100), Arrow(size=15),
                                 Position(100, 100), 15)

    def test_touching_exactly_is_not_a_hit(self):
        # radius 15 + size/3 = 5 -> exactly 20 apart
        assert not arrow_hits_player(Position(120, 100), Arrow(size=15),
                                     Position(100, 100), 15)

    def test_just_inside_is_a_hit(self):
        assert arrow_hits_player(Position(119.999, 100), Arrow(size=15),
                                 Position(100, 100), 15)


class TestSweep:

    def test_pattern_arrow_moves_in_a_straight_line(self):
        world = World()
        add_player(world, 400, 300)
        eid = spawn_pattern_arrow(world, 0, 50, 3, 0)

        for _ in range(10):
            assert projectile_system(world, 0.0, WIDTH, HEIGHT) is None

        pos = world.get_component(eid, Position)
        vel = world.get_component(eid, Velocity)
        assert (pos.x, pos.y) == pytest.approx((30, 50))
        assert (vel.x, vel.y) == (3, 0)

    def test_homing_arrow_expires_after_lifetime_not_before(self):
        world = World()
        add_player(world, 400, 300)
        eid = spawn_homing_arrow(world, 400, 100, 0, 0, created_at=2.0)

        projectile_system(world, 7.0, WIDTH, HEIGHT)
        world.process_dead_entities()
        assert world.is_alive(eid)

        projectile_system(world, 7.0001, WIDTH, HEIGHT)
        world.process_dead_entities()
        assert not world.is_alive(eid)

    def test_pattern_arrows_never_expire_by_age(self):
        world = World()
        add_player(world, 400, 300)
        eid = spawn_pattern_arrow(world, 100, 100, 0, 0)

        projectile_system(world, 1000.0, WIDTH, HEIGHT)
        world.process_dead_entities()
        assert world.is_alive(eid)

    def test_culls_beyond_margin_only(self):
        world = World()
        add_player(world, 400, 300)
        inside = spawn_pattern_arrow(world, -19, 300, 0, 0)
        outside = spawn_pattern_arrow(world, -21, 300, 0, 0)
        below = spawn_pattern_arrow(world, 400, HEIGHT + 20.5, 0, 0)

        projectile_system(world, 0.0, WIDTH, HEIGHT)
        world.process_dead_entities()

        assert world.is_alive(inside)
        assert not world.is_alive(outside)
        assert not world.is_alive(below)

    def test_stops_at_first_hit(self):
        world = World()
        add_player(world, 100, 100)
        untouched = spawn_pattern_arrow(world, 600, 500, 1, 0)
        hitter = spawn_pattern_arrow(world, 110, 100, 0, 0, size=15)

        assert projectile_system(world, 0.0, WIDTH, HEIGHT) == hitter
        # Older arrows after the hit were not moved this frame
        assert world.get_component(untouched, Position).x == 600

    def test_every_arrow_visited_once_while_many_are_removed(self):
        world = World()
        add_player(world, 400, 300)
        gone = [spawn_pattern_arrow(world, -100, 10 * i, 0, 0) for i in range(5)]
        kept = [spawn_pattern_arrow(world, 50, 10 * i, 1, 0) for i in range(5)]

        projectile_system(world, 0.0, WIDTH, HEIGHT)
        world.process_dead_entities()

        assert all(not world.is_alive(eid) for eid in gone)
        assert [world.get_component(eid, Position).x for eid in kept] == [51] * 5

    def test_homing_arrow_steers_toward_player(self):
        world = World()
        add_player(world, 400, 400)
        eid = spawn_homing_arrow(world, 100, 400, 0, -2, created_at=0.0)

        projectile_system(world, 0.0, WIDTH, HEIGHT)

        arrow = world.get_component(eid, Arrow)
        # Heading was straight up (-pi/2); the player is due east
        assert arrow.angle == pytest.approx(-math.pi / 2 + 0.03)
        assert world.get_component(eid, Homing).created_at == 0.0
