import logging
from pathlib import Path

import discord
from discord.ext import commands

from fogcrawl.config import load_settings


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def get_cog_module_names(cogs_path: Path) -> list[str]:
    return [
        f"cogs.{path.stem}"
        for path in sorted(cogs_path.glob("*.py"))
        if not path.name.startswith("__")
    ]


async def load_cogs(bot: commands.Bot, cogs_path: Path) -> None:
    for module_name in get_cog_module_names(cogs_path):
        await bot.load_extension(module_name)
        logging.info("Loaded cog: %s", module_name)


class CrawlBot(commands.Bot):
    """Bot that exposes the crawl through slash commands and buttons only."""

    def __init__(self) -> None:
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=discord.Intents.default(),
            help_command=None,
        )
        self._cogs_path = Path(__file__).parent / "cogs"

    async def setup_hook(self) -> None:  # type: ignore[override]
        await load_cogs(self, self._cogs_path)
        synced_commands = await self.tree.sync()
        logging.info("Synced %s application commands", len(synced_commands))

    def add_command(  # type: ignore[override]
        self, command: commands.Command, *args, **kwargs
    ) -> None:
        raise TypeError("CrawlBot does not support prefixed commands.")

    async def process_commands(self, message: discord.Message) -> None:  # type: ignore[override]
        return


def create_bot() -> commands.Bot:
    return CrawlBot()


def main() -> None:
    configure_logging()
    token = load_settings().require_token()
    bot = create_bot()

    try:
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logging.info("Shutting down bot")


if __name__ == "__main__":
    main()
