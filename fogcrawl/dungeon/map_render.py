"""Fog-of-war map rendering as text and as raster images."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from PIL import Image, ImageDraw, ImageFont

from fogcrawl.content.models import ItemType
from fogcrawl.grid import Position

from .knowledge import KnowledgeState
from .level import Level

__all__ = [
    "DARK_PALETTE",
    "LIGHT_PALETTE",
    "Palette",
    "RENDER_PRIORITY",
    "RenderConfig",
    "Tile",
    "TileKind",
    "classify_cell",
    "render_grid_map",
    "render_text_map",
]

# Which occupant's icon wins when a cell holds several items.
RENDER_PRIORITY: tuple[ItemType, ...] = (
    ItemType.WALL,
    ItemType.BUSH,
    ItemType.FLOWER,
    ItemType.CUSTOM_WALL,
    ItemType.DOOR,
    ItemType.KEY,
    ItemType.MONSTER,
    ItemType.TREASURE,
    ItemType.POTION,
    ItemType.EXIT,
    ItemType.EXIT_OPEN,
    ItemType.VOID,
    ItemType.WEAPON_SHOP,
    ItemType.ARMOR_SHOP,
    ItemType.INN,
    ItemType.VILLAGER,
)

ICONS: Dict[ItemType, str] = {
    ItemType.WALL: "#",
    ItemType.BUSH: '"',
    ItemType.FLOWER: "*",
    ItemType.CUSTOM_WALL: "%",
    ItemType.DOOR: "D",
    ItemType.KEY: "k",
    ItemType.MONSTER: "M",
    ItemType.TREASURE: "$",
    ItemType.POTION: "!",
    ItemType.EXIT: "E",
    ItemType.EXIT_OPEN: "O",
    ItemType.VOID: "~",
    ItemType.WEAPON_SHOP: "W",
    ItemType.ARMOR_SHOP: "A",
    ItemType.INN: "I",
    ItemType.VILLAGER: "V",
}

PLAYER_ICON = "@"
HIDDEN_ICON = "?"
DISCOVERED_ICON = "."
SCENE_ICON = "+"


class TileKind(str, Enum):
    HIDDEN = "hidden"
    PLAYER = "player"
    ITEM = "item"
    REMEMBERED = "remembered"
    DISCOVERED = "discovered"


@dataclass(frozen=True)
class Tile:
    kind: TileKind
    item_type: Optional[ItemType] = None
    has_scene: bool = False

    @property
    def icon(self) -> str:
        if self.kind is TileKind.PLAYER:
            return PLAYER_ICON
        if self.kind is TileKind.HIDDEN:
            return HIDDEN_ICON
        if self.item_type is not None:
            return ICONS[self.item_type]
        return SCENE_ICON if self.has_scene else DISCOVERED_ICON


def classify_cell(
    level: Level, knowledge: KnowledgeState, player: Position, position: Position
) -> Tile:
    """Decide what the player is allowed to see at ``position``.

    Unexplored cells are hidden whatever they contain. Visible cells show the
    current occupant, else the last remembered one, else a plain marker.
    """

    if position == player:
        return Tile(TileKind.PLAYER)
    if not knowledge.is_visible(level, position):
        return Tile(TileKind.HIDDEN)
    present = {item.type for item in level.items_at(position)}
    for item_type in RENDER_PRIORITY:
        if item_type in present:
            return Tile(TileKind.ITEM, item_type)
    remembered = knowledge.revealed_special.get(position)
    if remembered is not None:
        return Tile(TileKind.REMEMBERED, remembered)
    return Tile(TileKind.DISCOVERED, has_scene=bool(level.scene_at(position)))


def render_text_map(level: Level, knowledge: KnowledgeState, player: Position) -> str:
    """Render the level as a monospace grid with column letters and row numbers."""

    gutter = len(str(level.rows))
    header = " " * (gutter + 1) + " ".join(chr(65 + col) for col in range(level.cols))
    lines: List[str] = [header]
    for row in range(level.rows):
        icons = [
            classify_cell(level, knowledge, player, Position(row, col)).icon
            for col in range(level.cols)
        ]
        lines.append(f"{row + 1:>{gutter}} " + " ".join(icons))
    return "\n".join(lines)


Colour = tuple[int, int, int, int]


@dataclass(frozen=True)
class Palette:
    background: Colour
    hidden: Colour
    floor: Colour
    wall: Colour
    grid_line: Colour
    label: Colour
    icon: Colour
    player: Colour
    remembered: Colour


LIGHT_PALETTE = Palette(
    background=(244, 241, 232, 255),
    hidden=(120, 122, 130, 255),
    floor=(230, 226, 210, 255),
    wall=(92, 84, 72, 255),
    grid_line=(190, 186, 176, 255),
    label=(40, 40, 48, 255),
    icon=(30, 30, 36, 255),
    player=(196, 64, 52, 255),
    remembered=(112, 112, 128, 255),
)

DARK_PALETTE = Palette(
    background=(16, 17, 23, 255),
    hidden=(34, 36, 46, 255),
    floor=(54, 59, 82, 255),
    wall=(134, 142, 170, 255),
    grid_line=(24, 26, 34, 255),
    label=(240, 245, 255, 255),
    icon=(233, 242, 255, 255),
    player=(88, 189, 129, 255),
    remembered=(150, 156, 180, 255),
)


@dataclass(frozen=True)
class RenderConfig:
    """Configuration controlling how crawl maps are rendered."""

    tile_size: int = 32
    margin: int = 28
    dark_mode: bool = False

    @property
    def palette(self) -> Palette:
        return DARK_PALETTE if self.dark_mode else LIGHT_PALETTE


def render_grid_map(
    level: Level,
    knowledge: KnowledgeState,
    player: Position,
    *,
    config: RenderConfig | None = None,
) -> Image.Image:
    """Render the visible part of ``level`` as a :class:`PIL.Image`."""

    config = config or RenderConfig()
    palette = config.palette
    tile = max(12, config.tile_size)
    margin = max(tile // 2, config.margin)

    width = level.cols * tile + margin * 2
    height = level.rows * tile + margin * 2
    image = Image.new("RGBA", (width, height), palette.background)
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()

    def centred_text(x: int, y: int, text: str, colour: Colour) -> None:
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        draw.text(
            (x - (right - left) // 2 - left, y - (bottom - top) // 2 - top),
            text,
            fill=colour,
            font=font,
        )

    for col in range(level.cols):
        centred_text(margin + col * tile + tile // 2, margin // 2, chr(65 + col), palette.label)
    for row in range(level.rows):
        centred_text(margin // 2, margin + row * tile + tile // 2, str(row + 1), palette.label)

    for position in level.positions():
        cell = classify_cell(level, knowledge, player, position)
        left = margin + position.col * tile
        top = margin + position.row * tile
        box = (left, top, left + tile - 1, top + tile - 1)
        if cell.kind is TileKind.HIDDEN:
            fill = palette.hidden
        elif cell.item_type is not None and cell.item_type.is_wall:
            fill = palette.wall
        else:
            fill = palette.floor
        draw.rectangle(box, fill=fill, outline=palette.grid_line)

        centre = (left + tile // 2, top + tile // 2)
        if cell.kind is TileKind.PLAYER:
            inset = tile // 4
            draw.ellipse(
                (left + inset, top + inset, left + tile - inset, top + tile - inset),
                fill=palette.player,
            )
        elif cell.kind is TileKind.REMEMBERED:
            centred_text(*centre, cell.icon, palette.remembered)
        elif cell.kind is not TileKind.HIDDEN and not (
            cell.item_type is not None and cell.item_type.is_wall
        ):
            centred_text(*centre, cell.icon, palette.icon)

    return image
