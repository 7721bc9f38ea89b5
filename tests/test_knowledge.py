from fogcrawl.content import ItemType, LevelTemplate
from fogcrawl.dungeon.knowledge import DiscoveryLog, KnowledgeState
from fogcrawl.grid import Position


def make_level(items):
    return LevelTemplate.from_mapping("test", {"rows": 4, "cols": 4, "items": items}).instantiate()


def test_entering_reveals_neighbours_and_bumps_walls() -> None:
    level = make_level(
        [
            {"type": "wall", "pos": "B1"},
            {"type": "key", "pos": "A2"},
        ]
    )
    knowledge = KnowledgeState()

    assert knowledge.enter(level, Position(0, 0)) is True
    assert knowledge.enter(level, Position(0, 0)) is False

    assert Position(0, 1) in knowledge.wall_bumped
    assert Position(1, 0) in knowledge.revealed_neighbors
    assert knowledge.revealed_special == {Position(1, 0): ItemType.KEY}


def test_special_snapshot_outlives_the_item() -> None:
    level = make_level([{"type": "treasure", "pos": "B2"}])
    knowledge = KnowledgeState()
    knowledge.enter(level, Position(1, 0))
    level.remove_item(ItemType.TREASURE, Position(1, 1))

    assert knowledge.revealed_special[Position(1, 1)] is ItemType.TREASURE
    assert knowledge.is_visible(level, Position(1, 1))


def test_snapshot_prefers_key_over_other_occupants() -> None:
    level = make_level(
        [
            {"type": "potion", "pos": "A2"},
            {"type": "key", "pos": "A2"},
        ]
    )
    knowledge = KnowledgeState()
    knowledge.enter(level, Position(0, 0))
    assert knowledge.revealed_special[Position(1, 0)] is ItemType.KEY


def test_bumped_cells_stay_visible_only_while_they_block() -> None:
    level = make_level([{"type": "door", "pos": "D4"}])
    knowledge = KnowledgeState()
    knowledge.bump(Position(3, 3))
    assert not knowledge.is_visible(level, Position(3, 3))

    knowledge.bump(Position(-1, 0))
    assert knowledge.is_visible(level, Position(-1, 0))


def test_unexplored_cells_are_not_visible() -> None:
    level = make_level([{"type": "monster", "pos": "D4"}])
    knowledge = KnowledgeState()
    knowledge.enter(level, Position(0, 0))
    assert not knowledge.is_visible(level, Position(3, 3))


def test_forget_clears_remembered_icon() -> None:
    knowledge = KnowledgeState()
    knowledge.remember(Position(1, 1), ItemType.MONSTER)
    knowledge.forget(Position(1, 1))
    knowledge.forget(Position(1, 1))
    assert knowledge.revealed_special == {}


def test_discovery_log_first_visit_is_recorded_once() -> None:
    log = DiscoveryLog()
    assert log.record_first_visit(Position(0, 0), "Start.")
    assert not log.record_first_visit(Position(0, 0), "Again.")
    log.append(Position(0, 0), "Combat.")

    assert [entry.text for entry in log] == ["Start.", "Combat."]
    assert [entry.text for entry in log.latest_first()] == ["Combat.", "Start."]
    assert len(log) == 2
