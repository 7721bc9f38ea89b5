import json
from pathlib import Path

import pytest

from fogcrawl.content import (
    ContentLibrary,
    ContentLoadError,
    ItemType,
    LevelTemplate,
    MonsterMeta,
    PotionMeta,
    RewardKind,
    SchemaError,
    TreasureMeta,
)
from fogcrawl.grid import Position

ROOT = Path(__file__).resolve().parents[1]


def write_level(base: Path, name: str, text: str) -> Path:
    levels = base / "levels"
    levels.mkdir(parents=True, exist_ok=True)
    path = levels / name
    path.write_text(text, encoding="utf-8")
    return path


def test_bundled_content_loads() -> None:
    library = ContentLibrary.load_from_path(ROOT / "data")
    assert library.campaign.title == "Fog Crawl"
    assert library.start_level.key == "level1"
    level1 = library.levels.get("level1")
    assert (level1.rows, level1.cols) == (6, 6)
    assert level1.next_level_id == "level2"
    assert level1.scenes[Position(0, 0)] == "A quiet entryway. The air is still."
    assert library.levels.get("level2").next_level_id is None


def test_yaml_and_json_levels_are_combined(tmp_path: Path) -> None:
    write_level(
        tmp_path,
        "a.yaml",
        "id: first\nrows: 3\ncols: 3\nnext_level: second\nitems:\n  - {type: key, pos: B2}\n",
    )
    write_level(
        tmp_path,
        "b.json",
        json.dumps({"id": "second", "name": "Second Floor", "rows": 2, "cols": 4}),
    )

    library = ContentLibrary.load_from_path(tmp_path)

    assert library.levels.keys() == ("first", "second")
    assert library.start_level.key == "first"
    assert library.levels.get("Second Floor").key == "second"
    first = library.levels.get("first")
    assert first.items[0].type is ItemType.KEY
    assert first.items[0].position == Position(1, 1)


def test_campaign_file_selects_start_level(tmp_path: Path) -> None:
    write_level(tmp_path, "a.yaml", "id: first\nrows: 2\ncols: 2\n")
    write_level(tmp_path, "b.yaml", "id: second\nrows: 2\ncols: 2\n")
    (tmp_path / "campaign.yaml").write_text("title: Deep Fog\nstart_level: second\n", encoding="utf-8")

    library = ContentLibrary.load_from_path(tmp_path)

    assert library.campaign.title == "Deep Fog"
    assert library.start_level.key == "second"


def test_missing_levels_directory_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ContentLoadError):
        ContentLibrary.load_from_path(tmp_path)


def test_broken_yaml_reports_the_file(tmp_path: Path) -> None:
    path = write_level(tmp_path, "broken.yaml", "rows: [1, 2\n")
    with pytest.raises(ContentLoadError) as excinfo:
        ContentLibrary.load_from_path(tmp_path)
    assert excinfo.value.path == path


def test_unknown_next_level_is_rejected(tmp_path: Path) -> None:
    write_level(tmp_path, "a.yaml", "id: first\nrows: 2\ncols: 2\nnext_level: nowhere\n")
    with pytest.raises(ContentLoadError, match="nowhere"):
        ContentLibrary.load_from_path(tmp_path)


def test_unknown_reward_kind_is_rejected() -> None:
    with pytest.raises(SchemaError):
        LevelTemplate.from_mapping(
            "bad",
            {
                "rows": 2,
                "cols": 2,
                "items": [{"type": "treasure", "pos": "A1", "meta": {"kind": "diamonds"}}],
            },
        )


@pytest.mark.parametrize(
    "data",
    [
        {"rows": 0, "cols": 3},
        {"rows": 3, "cols": 27},
        {"rows": "many", "cols": 3},
        {"rows": 2, "cols": 2, "items": [{"type": "key", "pos": "C1"}]},
        {"rows": 2, "cols": 2, "items": [{"type": "dragon", "pos": "A1"}]},
        {"rows": 2, "cols": 2, "items": [{"type": "key", "pos": "11"}]},
        {"rows": 2, "cols": 2, "start": "C3"},
    ],
)
def test_invalid_level_shapes_are_rejected(data) -> None:
    with pytest.raises(SchemaError):
        LevelTemplate.from_mapping("bad", data)


@pytest.mark.parametrize("item_type", ["void", "monster", "wall", "bush", "custom_wall"])
def test_level_cannot_start_on_a_blocking_cell(item_type: str) -> None:
    with pytest.raises(SchemaError, match="cannot start on"):
        LevelTemplate.from_mapping(
            "bad", {"rows": 3, "cols": 3, "items": [{"type": item_type, "pos": "A1"}]}
        )


def test_moved_start_may_sit_beside_a_void() -> None:
    level = LevelTemplate.from_mapping(
        "edge",
        {"rows": 3, "cols": 3, "start": "B2", "items": [{"type": "void", "pos": "A1"}]},
    )
    assert level.start == Position(1, 1)


def test_void_start_file_is_reported_with_its_path(tmp_path: Path) -> None:
    bad = write_level(
        tmp_path, "bad.yaml", "rows: 3\ncols: 3\nitems:\n  - {type: void, pos: A1}\n"
    )
    with pytest.raises(ContentLoadError) as excinfo:
        ContentLibrary.load_from_path(tmp_path)
    assert excinfo.value.path == bad


def test_item_metadata_defaults() -> None:
    level = LevelTemplate.from_mapping(
        "meta",
        {
            "rows": 3,
            "cols": 3,
            "start": "C3",
            "items": [
                {"type": "monster", "pos": "A1", "meta": {"hp": "", "atk": 4, "def": 1}},
                {"type": "potion", "pos": "B1", "meta": {"heal": "lots"}},
                {"type": "treasure", "pos": "A2", "meta": {"kind": "Gold", "value": 25}},
                {"type": "wall", "pos": "B2", "meta": {"ignored": True}},
            ],
        },
    )
    monster, potion, treasure, wall = level.items
    assert monster.meta == MonsterMeta(hp=6, attack=4, defense=1)
    assert potion.meta == PotionMeta(heal=3)
    assert treasure.meta == TreasureMeta(kind=RewardKind.GOLD, value=25)
    assert wall.meta is None


def test_instantiate_returns_independent_copies() -> None:
    template = LevelTemplate.from_mapping(
        "copy", {"rows": 2, "cols": 2, "items": [{"type": "exit", "pos": "B2"}]}
    )
    first = template.instantiate()
    first.open_exit(Position(1, 1))
    second = template.instantiate(opening_text="Fresh start.")

    assert template.items[0].type is ItemType.EXIT
    assert second.has(Position(1, 1), ItemType.EXIT)
    assert second.scene_at(Position(0, 0)) == "Fresh start."


def test_one_file_may_hold_several_levels(tmp_path: Path) -> None:
    write_level(
        tmp_path,
        "pair.yaml",
        "- {rows: 2, cols: 2, next_level: pair-1}\n- {rows: 3, cols: 3, name: Lower Hall}\n",
    )

    library = ContentLibrary.load_from_path(tmp_path)

    assert library.levels.keys() == ("pair-0", "pair-1")
    assert library.levels.get("lower hall").key == "pair-1"
    assert "PAIR-0" in library.levels
    assert "cellar" not in library.levels


def test_duplicate_level_ids_are_rejected(tmp_path: Path) -> None:
    write_level(tmp_path, "a.yaml", "id: hall\nrows: 2\ncols: 2\n")
    duplicate = write_level(tmp_path, "b.yaml", "id: Hall\nrows: 2\ncols: 2\n")

    with pytest.raises(ContentLoadError) as excinfo:
        ContentLibrary.load_from_path(tmp_path)
    assert excinfo.value.path == duplicate
