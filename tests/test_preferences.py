import asyncio
import json
import logging
from pathlib import Path

from fogcrawl.dungeon.state import PreferenceStore, dark_mode_key, opening_key


def test_values_round_trip_through_disk(tmp_path: Path) -> None:
    path = tmp_path / "state" / "preferences.json"

    async def run() -> None:
        store = PreferenceStore(path)
        assert await store.get(opening_key("level1")) is None
        await store.set(opening_key("level1"), "A new beginning.")
        await store.set_flag(dark_mode_key(42), True)

        reopened = PreferenceStore(path)
        assert await reopened.get("opening:level1") == "A new beginning."
        assert await reopened.get_flag("dark_mode:42")
        assert not await reopened.get_flag("dark_mode:7")

    asyncio.run(run())
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "dark_mode:42": "true",
        "opening:level1": "A new beginning.",
    }


def test_clearing_a_value_removes_it(tmp_path: Path) -> None:
    path = tmp_path / "preferences.json"

    async def run() -> None:
        store = PreferenceStore(path)
        await store.set("opening:level1", "Text.")
        await store.set("opening:level1", None)
        await store.set_flag("dark_mode:1", False)
        assert await store.get("opening:level1") is None
        assert not await store.get_flag("dark_mode:1")

    asyncio.run(run())
    assert json.loads(path.read_text(encoding="utf-8")) == {}


def test_malformed_file_is_ignored(tmp_path: Path, caplog) -> None:
    path = tmp_path / "preferences.json"
    path.write_text("{not json", encoding="utf-8")

    async def run() -> None:
        store = PreferenceStore(path)
        assert await store.get("opening:level1") is None
        await store.set("opening:level1", "Recovered.")
        assert await store.get("opening:level1") == "Recovered."

    with caplog.at_level(logging.WARNING):
        asyncio.run(run())
    assert "malformed" in caplog.text


def test_write_failures_are_logged_not_raised(tmp_path: Path, caplog) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    path = blocker / "preferences.json"

    async def run() -> None:
        store = PreferenceStore(path)
        await store.set("dark_mode:1", "true")
        assert await store.get("dark_mode:1") == "true"

    with caplog.at_level(logging.WARNING):
        asyncio.run(run())
    assert "Could not write preferences" in caplog.text
