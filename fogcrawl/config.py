"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .narration import ANNOUNCE_DELAY

__all__ = ["Settings", "default_data_path", "load_settings"]

log = logging.getLogger(__name__)


def default_data_path() -> Path:
    return Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class Settings:
    token: Optional[str]
    data_path: Path
    announce_delay: float = ANNOUNCE_DELAY

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        raw_path = env.get("FOGCRAWL_DATA_PATH")
        data_path = Path(raw_path).expanduser() if raw_path else default_data_path()
        delay = ANNOUNCE_DELAY
        raw_delay = env.get("FOGCRAWL_ANNOUNCE_DELAY")
        if raw_delay:
            try:
                delay = max(0.0, float(raw_delay))
            except ValueError:
                log.warning("Ignoring invalid FOGCRAWL_ANNOUNCE_DELAY value %r", raw_delay)
        return cls(token=env.get("DISCORD_TOKEN") or None, data_path=data_path, announce_delay=delay)

    def require_token(self) -> str:
        if not self.token:
            raise RuntimeError(
                "DISCORD_TOKEN environment variable is required. "
                "Set it in the .env file before starting the bot."
            )
        return self.token


def load_settings() -> Settings:
    """Load ``.env`` into the process environment and read the settings."""

    load_dotenv()
    return Settings.from_env()
