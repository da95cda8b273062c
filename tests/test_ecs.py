"""Tests for the entity/component world."""

from dodgescape.components import Position, Velocity, PlayerTag
from dodgescape.ecs import World


class TestWorld:

    def test_create_entity_attaches_components(self):
        world = World()
        eid = world.create_entity(Position(1, 2), Velocity(3, 4))

        assert world.get_component(eid, Position) == Position(1, 2)
        assert world.has_component(eid, Velocity)
        assert not world.has_component(eid, PlayerTag)

    def test_destroy_is_deferred_until_processed(self):
        world = World()
        eid = world.create_entity(Position())
        world.destroy_entity(eid)

        assert not world.is_alive(eid)
        assert world.get_component(eid, Position) is not None
        assert world.count(Position) == 0

        assert world.process_dead_entities() == 1
        assert world.get_component(eid, Position) is None

    def test_query_tolerates_destroy_during_iteration(self):
        world = World()
        ids = [world.create_entity(Position(i, 0)) for i in range(10)]

        visited = []
        for eid, pos in world.query(Position):
            visited.append(eid)
            # Kill the current one and the next one
            world.destroy_entity(eid)
            if eid + 1 < len(ids):
                world.destroy_entity(eid + 1)

        assert visited == [0, 2, 4, 6, 8]
        world.process_dead_entities()
        assert world.entity_count() == 0

    def test_query_ignores_entities_created_mid_iteration(self):
        world = World()
        world.create_entity(Position())
        world.create_entity(Position())

        seen = 0
        for _ in world.query(Position):
            world.create_entity(Position())
            seen += 1

        assert seen == 2
        assert world.count(Position) == 4

    def test_query_requires_all_components(self):
        world = World()
        a = world.create_entity(Position(), Velocity())
        world.create_entity(Position())

        assert world.entity_ids(Position, Velocity) == [a]
        assert world.entity_ids(Position, PlayerTag) == []
