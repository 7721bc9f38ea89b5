"""Structured content loading helpers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Mapping

import yaml

from .models import Campaign, LevelTemplate, SchemaError
from .registry import LevelRegistry

__all__ = ["ContentLibrary", "ContentLoadError"]

log = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".json", ".yaml", ".yml")
CAMPAIGN_STEMS = ("campaign",)


class ContentLoadError(RuntimeError):
    """Raised when content could not be loaded from disk."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        if path is not None:
            message = f"{message} (source: {path})"
        super().__init__(message)
        self.path = path


@dataclass(frozen=True)
class ContentLibrary:
    """Container bundling the campaign settings and its levels."""

    base_path: Path
    campaign: Campaign
    levels: LevelRegistry

    @classmethod
    def load_from_path(cls, base_path: Path) -> "ContentLibrary":
        loader = _ContentLoader(base_path)
        return loader.load()

    @property
    def start_level(self) -> LevelTemplate:
        if self.campaign.start_level:
            return self.levels.get(self.campaign.start_level)
        first = self.levels.first()
        if first is None:
            raise LookupError("No levels are loaded")
        return first


class _ContentLoader:
    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path

    # -- public entrypoint -------------------------------------------------
    def load(self) -> ContentLibrary:
        campaign = self._load_campaign()
        levels = self._load_levels()
        self._check_links(campaign, levels)
        log.info("Loaded %s levels from %s", len(levels), self.base_path)
        return ContentLibrary(base_path=self.base_path, campaign=campaign, levels=levels)

    # -- concrete loaders --------------------------------------------------
    def _load_campaign(self) -> Campaign:
        for stem in CAMPAIGN_STEMS:
            for extension in SUPPORTED_EXTENSIONS:
                file_path = self.base_path / f"{stem}{extension}"
                if not file_path.is_file():
                    continue
                raw = self._load_structured(file_path)
                if raw is None:
                    return Campaign()
                try:
                    return Campaign.from_mapping(raw)  # type: ignore[arg-type]
                except SchemaError as exc:
                    raise ContentLoadError(str(exc), path=file_path) from exc
        return Campaign()

    def _load_levels(self) -> LevelRegistry:
        registry = LevelRegistry()
        for file_path, level_id, raw in self._iter_level_definitions():
            try:
                level = LevelTemplate.from_mapping(level_id, raw)
            except SchemaError as exc:
                raise ContentLoadError(str(exc), path=file_path) from exc
            try:
                registry.register(level.key, level)
            except ValueError as exc:
                raise ContentLoadError(str(exc), path=file_path) from exc
        if not len(registry):
            raise ContentLoadError("No level definitions found", path=self.base_path / "levels")
        return registry

    def _check_links(self, campaign: Campaign, levels: LevelRegistry) -> None:
        if campaign.start_level and campaign.start_level not in levels:
            raise ContentLoadError(
                f"Campaign start level '{campaign.start_level}' is not defined",
                path=self.base_path,
            )
        for level in levels:
            if level.next_level_id and level.next_level_id not in levels:
                raise ContentLoadError(
                    f"Level '{level.key}' links to unknown level '{level.next_level_id}'",
                    path=self.base_path / "levels",
                )

    # -- helpers -----------------------------------------------------------
    def _level_files(self) -> list[Path]:
        directory = self.base_path / "levels"
        if not directory.is_dir():
            return []
        return sorted(
            path
            for path in directory.iterdir()
            if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS
        )

    def _iter_level_definitions(self) -> Iterator[tuple[Path, str, Mapping[str, object]]]:
        """Yield ``(file, level id, raw mapping)`` for every level on disk.

        A file holds either one level or a list of levels. A level without an
        ``id`` is named after its file, with the list index appended when the
        file holds several.
        """

        for file_path in self._level_files():
            raw = self._load_structured(file_path)
            if isinstance(raw, Mapping):
                yield file_path, _level_id(raw, file_path.stem), raw
                continue
            if not isinstance(raw, list):
                raise ContentLoadError(
                    "Expected a level mapping or a list of level mappings", path=file_path
                )
            for index, element in enumerate(raw):
                if not isinstance(element, Mapping):
                    raise ContentLoadError(
                        f"Entry {index} is not a level mapping", path=file_path
                    )
                yield file_path, _level_id(element, f"{file_path.stem}-{index}"), element

    def _load_structured(self, file_path: Path) -> object:
        try:
            text = file_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ContentLoadError("Unable to read content file", path=file_path) from exc
        try:
            if file_path.suffix.lower() == ".json":
                return json.loads(text)
            return yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ContentLoadError("Failed to parse structured content", path=file_path) from exc


def _level_id(mapping: Mapping[str, object], fallback: str) -> str:
    value = mapping.get("id")
    if isinstance(value, str) and value.strip():
        return value
    return fallback
