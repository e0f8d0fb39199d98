"""
Client configuration settings.
"""

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ClientSettings:
    """Client configuration."""

    # Pause between turns so the view can animate the last move
    turn_delay_ms: int = 2000

    # Start the next turn automatically once the delay has passed
    auto_play: bool = False


def load_settings() -> ClientSettings:
    """Load settings from environment variables."""
    return ClientSettings(
        turn_delay_ms=int(os.getenv("LADDER_TURN_DELAY_MS", "2000")),
        auto_play=_env_bool("LADDER_AUTO_PLAY", False),
    )


settings = load_settings()
