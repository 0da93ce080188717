from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str = "redis://localhost:6379/0"
    # Lives every player starts with.
    max_lives: int = 3
    # Pause between a resolved submission and the next word being drawn.
    next_word_delay_sec: float = 2.0
    session_id_length: int = 10
    log_level: str = "INFO"


def settings_from_env() -> Settings:
    return Settings(
        redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        max_lives=int(os.environ.get("MAX_LIVES", "3")),
        next_word_delay_sec=float(os.environ.get("NEXT_WORD_DELAY_SEC", "2.0")),
        session_id_length=int(os.environ.get("SESSION_ID_LENGTH", "10")),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
