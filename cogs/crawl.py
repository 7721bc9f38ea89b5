"""Crawl commands and the button controls attached to each crawl message."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from io import BytesIO
from typing import Awaitable, Callable, Deque, Dict, Iterable, List, Optional

import discord
from discord import app_commands
from discord.ext import commands

from fogcrawl.config import Settings
from fogcrawl.content import ContentLibrary, ContentLoadError
from fogcrawl.dungeon.knowledge import DiscoveryLog
from fogcrawl.dungeon.map_render import RenderConfig, render_grid_map, render_text_map
from fogcrawl.dungeon.state import PreferenceStore, dark_mode_key, opening_key
from fogcrawl.game import GameSession, TurnResult
from fogcrawl.grid import Direction
from fogcrawl.narration import ANNOUNCE_DELAY, Announcer
from fogcrawl.sessions import SessionKey, SessionManager

log = logging.getLogger(__name__)

TRANSCRIPT_LENGTH = 8
NO_SESSION_MESSAGE = "You have no active crawl in this channel. Use /crawl start to begin."
LOG_HEADER = "Exploration log (newest first):"
MESSAGE_LIMIT = 2000

TurnAction = Callable[[GameSession], TurnResult]


def format_discovery_log(discovery: DiscoveryLog, *, limit: int = MESSAGE_LIMIT) -> str:
    """Render the exploration log newest first, dropping the oldest lines past ``limit``."""

    lines = [LOG_HEADER]
    used = len(LOG_HEADER)
    for entry in discovery.latest_first():
        line = f"**{entry.position}** {entry.text}"
        if used + len(line) + 1 > limit:
            break
        lines.append(line)
        used += len(line) + 1
    if len(lines) == 1:
        return "Nothing has been discovered yet."
    return "\n".join(lines)


@dataclass
class CrawlSession:
    """State container for one player's crawl in a channel."""

    game: GameSession
    guild_id: Optional[int]
    channel_id: int
    user_id: int
    message_id: Optional[int] = None
    dark_mode: bool = False
    announce_delay: float = ANNOUNCE_DELAY
    transcript: Deque[str] = field(default_factory=lambda: deque(maxlen=TRANSCRIPT_LENGTH))
    announcer: Announcer = field(init=False)

    def __post_init__(self) -> None:
        self.announcer = Announcer(self._record, delay=self.announce_delay)

    async def _record(self, message: str) -> None:
        self.transcript.append(message)

    def queue(self, result: TurnResult) -> int:
        return self.announcer.announce_sequence(result.messages)

    async def drain(self) -> int:
        return await self.announcer.drain()


@dataclass
class SessionEmbedPayload:
    """Embeds and files representing a crawl update."""

    embeds: List[discord.Embed]
    files: List[discord.File] = field(default_factory=list)


class CrawlControlsView(discord.ui.View):
    """Movement and action buttons for a single crawl."""

    def __init__(self, cog: "CrawlCog", session: CrawlSession) -> None:
        super().__init__(timeout=None)
        self.cog = cog
        self._owner_id = session.user_id
        prefix = f"crawl:{session.channel_id}:{session.user_id}"
        game = session.game
        locked = game.finished

        self._add_action_button(
            label="North", style=discord.ButtonStyle.primary, custom_id=f"{prefix}:north",
            disabled=locked, row=0, handler=self._make_move_callback(Direction.NORTH),
        )
        self._add_action_button(
            label="West", style=discord.ButtonStyle.primary, custom_id=f"{prefix}:west",
            disabled=locked, row=1, handler=self._make_move_callback(Direction.WEST),
        )
        self._add_action_button(
            label="South", style=discord.ButtonStyle.primary, custom_id=f"{prefix}:south",
            disabled=locked, row=1, handler=self._make_move_callback(Direction.SOUTH),
        )
        self._add_action_button(
            label="East", style=discord.ButtonStyle.primary, custom_id=f"{prefix}:east",
            disabled=locked, row=1, handler=self._make_move_callback(Direction.EAST),
        )
        self._add_action_button(
            label="Act", style=discord.ButtonStyle.success, custom_id=f"{prefix}:act",
            disabled=locked, row=2, handler=self._handle_act,
        )
        self._add_action_button(
            label="Status", style=discord.ButtonStyle.secondary, custom_id=f"{prefix}:status",
            disabled=False, row=2, handler=self._handle_status,
        )
        self._add_action_button(
            label="Continue", style=discord.ButtonStyle.success, custom_id=f"{prefix}:continue",
            disabled=locked or not game.completed, row=2, handler=self._handle_confirm,
        )
        self._add_action_button(
            label="Restart", style=discord.ButtonStyle.danger, custom_id=f"{prefix}:restart",
            disabled=False, row=3, handler=self._handle_restart,
        )

    async def interaction_check(self, interaction: discord.Interaction) -> bool:  # noqa: D401
        if interaction.user.id == self._owner_id:
            return True
        await interaction.response.send_message(
            "Only the player who started this crawl can use these controls.",
            ephemeral=True,
        )
        return False

    def _add_action_button(
        self,
        *,
        label: str,
        style: discord.ButtonStyle,
        custom_id: str,
        disabled: bool,
        row: int,
        handler: Callable[[discord.Interaction], Awaitable[None]],
    ) -> None:
        button = discord.ui.Button(
            label=label,
            style=style,
            custom_id=custom_id,
            disabled=disabled,
            row=row,
        )
        button.callback = handler
        self.add_item(button)

    def _make_move_callback(
        self, direction: Direction
    ) -> Callable[[discord.Interaction], Awaitable[None]]:
        async def _callback(interaction: discord.Interaction) -> None:
            await self.cog.handle_move(interaction, direction)

        return _callback

    async def _handle_act(self, interaction: discord.Interaction) -> None:
        await self.cog.handle_act(interaction)

    async def _handle_status(self, interaction: discord.Interaction) -> None:
        await self.cog.handle_status(interaction)

    async def _handle_confirm(self, interaction: discord.Interaction) -> None:
        await self.cog.handle_confirm(interaction)

    async def _handle_restart(self, interaction: discord.Interaction) -> None:
        await self.cog.handle_restart(interaction)


class CrawlCog(commands.Cog):
    """Slash commands to explore hand-authored fog-of-war levels."""

    crawl_group = app_commands.Group(name="crawl", description="Fog-of-war dungeon crawling")

    def __init__(self, bot: commands.Bot, settings: Settings | None = None) -> None:
        self.bot = bot
        self.settings = settings or Settings.from_env()
        self.data_path = self.settings.data_path
        self.content_library: ContentLibrary | None = None
        self._content_error: ContentLoadError | None = None
        self.sessions: SessionManager[CrawlSession] = SessionManager()
        self.preferences = PreferenceStore(self.data_path / "state" / "preferences.json")
        self._load_content(silent=True)

    def cog_unload(self) -> None:  # noqa: D401 - discord.py hook
        try:
            self.bot.tree.remove_command(
                self.crawl_group.name,
                type=discord.AppCommandType.chat_input,
            )
        except (app_commands.CommandTreeException, KeyError):
            pass

    # ------------------------------------------------------------------
    def _load_content(self, *, silent: bool = False) -> None:
        try:
            library = ContentLibrary.load_from_path(self.data_path)
        except ContentLoadError as exc:
            self._content_error = exc
            log.warning("Crawl content unavailable: %s", exc)
            if not silent:
                raise
        else:
            self.content_library = library
            self._content_error = None

    @staticmethod
    def _session_key(interaction: discord.Interaction) -> SessionKey:
        return SessionManager.make_key(
            interaction.guild_id, interaction.channel_id, interaction.user.id
        )

    async def _send_ephemeral_message(
        self, interaction: discord.Interaction, message: str
    ) -> None:
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=True)
        else:
            await interaction.response.send_message(message, ephemeral=True)

    async def _opening_overrides(self, library: ContentLibrary) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for template in library.levels.values():
            text = await self.preferences.get(opening_key(template.key))
            if text:
                overrides[template.key] = text
        return overrides

    # ---- rendering -----------------------------------------------------
    def _build_map_image(self, session: CrawlSession) -> BytesIO:
        game = session.game
        assert game.level is not None
        image = render_grid_map(
            game.level,
            game.knowledge,
            game.player,
            config=RenderConfig(dark_mode=session.dark_mode),
        )
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        buffer.seek(0)
        return buffer

    def _build_session_embeds(self, session: CrawlSession) -> SessionEmbedPayload:
        game = session.game
        assert game.level is not None
        colour = discord.Color.dark_grey() if session.dark_mode else discord.Color.blurple()
        embed = discord.Embed(
            title=f"{game.campaign.title}: {game.level_id}",
            description="\n".join(session.transcript) or "The fog is thick.",
            color=colour,
        )
        stats = game.stats
        embed.add_field(name="Position", value=str(game.player))
        embed.add_field(name="Life", value=str(stats.life))
        embed.add_field(name="Gold", value=str(stats.gold))
        embed.add_field(name="Strength", value=str(stats.strength))
        embed.add_field(name="Defense", value=str(stats.defense))
        embed.add_field(name="Key", value="Yes" if stats.has_key else "No")
        if game.finished:
            embed.set_footer(text="Campaign complete. Press Restart to play the level again.")
        elif game.completed:
            embed.set_footer(text="Level complete. Press Continue to move on.")

        files: List[discord.File] = []
        try:
            image_buffer = self._build_map_image(session)
        except (OSError, ValueError):
            log.exception("Failed to render crawl map image")
        else:
            files.append(discord.File(image_buffer, filename="crawl_map.png"))
            embed.set_image(url="attachment://crawl_map.png")

        if not files:
            text_map = render_text_map(game.level, game.knowledge, game.player)
            embed.add_field(name="Map", value=f"```\n{text_map}\n```", inline=False)
        return SessionEmbedPayload(embeds=[embed], files=files)

    def _build_controls_view(self, session: CrawlSession) -> discord.ui.View:
        return CrawlControlsView(self, session)

    async def _refresh_session_message(
        self, interaction: discord.Interaction, session: CrawlSession
    ) -> None:
        if session.message_id is None:
            return
        payload = self._build_session_embeds(session)
        view = self._build_controls_view(session)
        try:
            await interaction.followup.edit_message(
                message_id=session.message_id,
                embeds=payload.embeds,
                view=view,
                attachments=payload.files or [],
            )
            self.bot.add_view(view, message_id=session.message_id)
        except discord.HTTPException:
            log.warning("Could not refresh crawl message %s", session.message_id)

    async def _refresh_session_view(self, session: CrawlSession) -> None:
        """Redraw a crawl message outside the interaction that owns it."""

        if session.message_id is None:
            return
        channel = self.bot.get_channel(session.channel_id)
        if channel is None:
            return
        partial_getter = getattr(channel, "get_partial_message", None)
        if callable(partial_getter):
            message = partial_getter(session.message_id)
        else:
            try:
                message = await channel.fetch_message(session.message_id)
            except (discord.HTTPException, AttributeError):
                return
        payload = self._build_session_embeds(session)
        view = self._build_controls_view(session)
        try:
            await message.edit(embeds=payload.embeds, view=view, attachments=payload.files or [])
        except discord.HTTPException:
            return
        self.bot.add_view(view, message_id=session.message_id)

    # ---- turn handling -------------------------------------------------
    async def _apply_turn(
        self, interaction: discord.Interaction, action: TurnAction
    ) -> Optional[CrawlSession]:
        """Run ``action`` on the caller's game and queue its narration."""

        applied = False

        def mutate(run: CrawlSession) -> None:
            nonlocal applied
            run.queue(action(run.game))
            applied = True

        session = await self.sessions.update(self._session_key(interaction), mutate)
        return session if applied else None

    async def _run_turn(self, interaction: discord.Interaction, action: TurnAction) -> None:
        session = await self._apply_turn(interaction, action)
        if session is None:
            await self._send_ephemeral_message(interaction, NO_SESSION_MESSAGE)
            return

        await interaction.response.defer()
        await session.drain()
        await self._refresh_session_message(interaction, session)

    async def handle_move(self, interaction: discord.Interaction, direction: Direction) -> None:
        await self._run_turn(interaction, lambda game: game.move(direction))

    async def handle_act(self, interaction: discord.Interaction) -> None:
        await self._run_turn(interaction, GameSession.act)

    async def handle_status(self, interaction: discord.Interaction) -> None:
        await self._run_turn(interaction, GameSession.status)

    async def handle_confirm(self, interaction: discord.Interaction) -> None:
        await self._run_turn(interaction, GameSession.confirm)

    async def handle_restart(self, interaction: discord.Interaction) -> None:
        await self._run_turn(interaction, GameSession.restart)

    # ---- slash commands ------------------------------------------------
    @crawl_group.command(name="start", description="Begin a new crawl in this channel.")
    async def start(self, interaction: discord.Interaction) -> None:
        library = self.content_library
        if library is None:
            message = "No levels are available. Add files under data/levels/ and use /crawl reload."
            if self._content_error is not None:
                message += f" Last load error: {self._content_error}."
            await interaction.response.send_message(message, ephemeral=True)
            return

        key = self._session_key(interaction)
        await interaction.response.defer(thinking=True)

        game = GameSession.from_library(
            library, opening_overrides=await self._opening_overrides(library)
        )
        session = CrawlSession(
            game=game,
            guild_id=interaction.guild_id,
            channel_id=interaction.channel_id,
            user_id=interaction.user.id,
            dark_mode=await self.preferences.get_flag(dark_mode_key(interaction.user.id)),
            announce_delay=self.settings.announce_delay,
        )
        await self.sessions.set(key, session)
        await self.sessions.update(key, lambda run: run.queue(run.game.begin()))
        await session.drain()

        payload = self._build_session_embeds(session)
        view = self._build_controls_view(session)
        extra = {"files": payload.files} if payload.files else {}
        try:
            message = await interaction.followup.send(
                embeds=payload.embeds, view=view, wait=True, **extra
            )
        except discord.HTTPException as exc:
            await self.sessions.pop(key)
            await self._send_ephemeral_message(interaction, f"I couldn't start the crawl: {exc}.")
            return

        await self.sessions.update(key, lambda run: setattr(run, "message_id", message.id))
        self.bot.add_view(view, message_id=message.id)
        log.info(
            "Started crawl for user %s in channel %s", interaction.user.id, interaction.channel_id
        )

    @crawl_group.command(name="status", description="Show your position and stats.")
    async def status(self, interaction: discord.Interaction) -> None:
        session = await self.sessions.get(self._session_key(interaction))
        if session is None:
            await interaction.response.send_message(NO_SESSION_MESSAGE, ephemeral=True)
            return
        await interaction.response.send_message(
            "\n".join(session.game.status().messages), ephemeral=True
        )

    @crawl_group.command(name="restart", description="Restart the current level with fresh stats.")
    async def restart(self, interaction: discord.Interaction) -> None:
        session = await self._apply_turn(interaction, GameSession.restart)
        if session is None:
            await interaction.response.send_message(NO_SESSION_MESSAGE, ephemeral=True)
            return
        await interaction.response.defer(ephemeral=True)
        await session.drain()
        await self._refresh_session_view(session)
        await interaction.followup.send(
            f"Level {session.game.level_id} restarted with fresh stats.", ephemeral=True
        )

    @crawl_group.command(name="log", description="Show what you have discovered on this level.")
    async def discovery_log(self, interaction: discord.Interaction) -> None:
        session = await self.sessions.get(self._session_key(interaction))
        if session is None:
            await interaction.response.send_message(NO_SESSION_MESSAGE, ephemeral=True)
            return
        await interaction.response.send_message(
            format_discovery_log(session.game.log), ephemeral=True
        )

    @crawl_group.command(name="darkmode", description="Switch the map between light and dark colours.")
    @app_commands.describe(enabled="Use the dark palette for your maps")
    async def darkmode(self, interaction: discord.Interaction, enabled: bool) -> None:
        await self.preferences.set_flag(dark_mode_key(interaction.user.id), enabled)
        session = await self.sessions.update(
            self._session_key(interaction), lambda run: setattr(run, "dark_mode", enabled)
        )
        state = "enabled" if enabled else "disabled"
        await interaction.response.send_message(f"Dark mode {state}.", ephemeral=True)
        if session is not None:
            await self._refresh_session_view(session)

    @crawl_group.command(name="opening", description="Replace the opening scene of a level.")
    @app_commands.describe(level="Level to change", text="New opening text; leave empty to restore the default")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def opening(
        self, interaction: discord.Interaction, level: str, text: Optional[str] = None
    ) -> None:
        library = self.content_library
        if library is None or level not in library.levels:
            await interaction.response.send_message(f"Unknown level '{level}'.", ephemeral=True)
            return
        template = library.levels.get(level)
        await self.preferences.set(opening_key(template.key), (text or "").strip() or None)
        action = "updated" if text and text.strip() else "restored"
        await interaction.response.send_message(
            f"Opening scene for {template.key} {action}. New crawls will use it.",
            ephemeral=True,
        )

    @opening.autocomplete("level")
    async def opening_level_autocomplete(
        self, interaction: discord.Interaction, current: str
    ) -> Iterable[app_commands.Choice[str]]:
        if self.content_library is None:
            return []
        keys = self.content_library.levels.keys()
        filtered = [key for key in keys if current.lower() in key.lower()][:25]
        return [app_commands.Choice(name=key, value=key) for key in filtered]

    @crawl_group.command(name="reload", description="Reload crawl levels from disk.")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def reload_content(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        try:
            self._load_content(silent=False)
        except ContentLoadError as exc:
            await interaction.followup.send(f"Failed to reload crawl content: {exc}", ephemeral=True)
            return
        await interaction.followup.send("Crawl content reloaded.", ephemeral=True)


async def setup(bot: commands.Bot) -> None:
    cog = CrawlCog(bot)
    await bot.add_cog(cog)
    existing = bot.tree.get_command(
        cog.crawl_group.name,
        type=discord.AppCommandType.chat_input,
    )
    if existing is not None:
        bot.tree.remove_command(
            cog.crawl_group.name,
            type=discord.AppCommandType.chat_input,
        )
    bot.tree.add_command(cog.crawl_group)
