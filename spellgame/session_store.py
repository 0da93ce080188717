from __future__ import annotations

import logging
import random
import string
from datetime import UTC, datetime

import redis

from spellgame.api.models import SessionPhase, SessionState

logger = logging.getLogger(__name__)

SESSIONS_SET_KEY = "spellgame:sessions"
SESSION_KEY_PREFIX = "spellgame:session:"  # + {session_id}

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _session_key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


def new_session_id(*, length: int = 10, rng: random.Random | None = None) -> str:
    """Opaque base36 id drawn from the OS entropy source."""

    rng = rng or random.SystemRandom()
    return "".join(rng.choice(_ID_ALPHABET) for _ in range(length))


class SessionRegistry:
    """Table of live sessions keyed by id.

    Every read and write of session state goes through this class; nothing
    else touches the redis keys.
    """

    def __init__(self, *, r: redis.Redis, id_length: int = 10) -> None:
        self._r = r
        self._id_length = id_length

    def create(self) -> str:
        session_id = new_session_id(length=self._id_length)
        while self._r.exists(_session_key(session_id)):
            session_id = new_session_id(length=self._id_length)

        now = _now()
        state = SessionState(session_id=session_id, created_at=now, last_updated_at=now)
        self._r.set(_session_key(session_id), state.model_dump_json())
        self._r.sadd(SESSIONS_SET_KEY, session_id)
        logger.info("session created session_id=%s", session_id)
        return session_id

    def get(self, session_id: str) -> SessionState | None:
        raw = self._r.get(_session_key(session_id))
        if not raw:
            return None
        state = SessionState.model_validate_json(raw)
        if state.phase == SessionPhase.ended:
            return None
        return state

    def save(self, state: SessionState) -> None:
        state.last_updated_at = _now()
        self._r.set(_session_key(state.session_id), state.model_dump_json())

    def remove(self, session_id: str) -> None:
        removed = self._r.delete(_session_key(session_id))
        self._r.srem(SESSIONS_SET_KEY, session_id)
        if removed:
            logger.info("session removed session_id=%s", session_id)

    def list_ids(self) -> list[str]:
        ids = sorted(self._r.smembers(SESSIONS_SET_KEY))
        return [sid for sid in ids if self._r.exists(_session_key(sid))]
