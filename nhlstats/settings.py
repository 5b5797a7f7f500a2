from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace

logger = logging.getLogger(__name__)

# statusCode values of games that can no longer change.
FINAL_STATUS_CODES = frozenset({"5", "6", "7"})


@dataclass(frozen=True)
class Params:
    """Session parameters. Max ages are in seconds; negative never expires."""

    cache_file: str | None = None
    offline: bool = False
    verbose: bool = False

    schedule_max_age: int = 60
    game_live_max_age: int = 60
    game_final_max_age: int = 60
    team_max_age: int = -1
    player_max_age: int = -1
    league_max_age: int = -1
    meta_max_age: int = -1

    @classmethod
    def from_env(cls) -> "Params":
        overrides: dict[str, object] = {}

        cache_file = (os.getenv("NHL_CACHE_FILE") or "").strip()
        if cache_file:
            overrides["cache_file"] = cache_file
        if os.getenv("NHL_OFFLINE") is not None:
            overrides["offline"] = _env_flag("NHL_OFFLINE")
        if os.getenv("NHL_VERBOSE") is not None:
            overrides["verbose"] = _env_flag("NHL_VERBOSE")

        for field in fields(cls):
            if not field.name.endswith("_max_age"):
                continue
            name = f"NHL_{field.name.upper()}"
            value = _env_int(name)
            if value is not None:
                overrides[field.name] = value

        return replace(cls(), **overrides)

    def game_max_age(self, status_code: str | None) -> int:
        if status_code in FINAL_STATUS_CODES:
            return self.game_final_max_age
        return self.game_live_max_age


def _env_flag(name: str) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    return raw in {"1", "true", "yes", "on"}


def _env_int(name: str) -> int | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return None
