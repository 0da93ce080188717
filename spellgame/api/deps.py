from __future__ import annotations

from spellgame.config import settings_from_env
from spellgame.game_service import SpellingGameService
from spellgame.infra.redis_client import create_redis
from spellgame.session_store import SessionRegistry

_SERVICE: SpellingGameService | None = None


def get_game_service() -> SpellingGameService:
    """Process-wide game service, built on first use.

    Unlike per-request redis clients, sessions, locks and channel bindings must
    outlive a single request, so one service instance owns them.
    """

    global _SERVICE
    if _SERVICE is None:
        settings = settings_from_env()
        registry = SessionRegistry(r=create_redis(), id_length=settings.session_id_length)
        _SERVICE = SpellingGameService(registry=registry, settings=settings)
    return _SERVICE


def reset_game_service_for_tests() -> None:
    global _SERVICE
    _SERVICE = None


def current_game_service() -> SpellingGameService | None:
    """The service if one was built; never builds one."""

    return _SERVICE
