from __future__ import annotations

import asyncio
import logging
import random

import redis
from fastapi import WebSocket
from pydantic import ValidationError

from spellgame import words
from spellgame.api.models import (
    JoinMessage,
    PlayerState,
    SessionPhase,
    SessionState,
    StartMessage,
    SubmitMessage,
    parse_inbound,
)
from spellgame.broadcast import publish
from spellgame.config import Settings
from spellgame.connections import ConnectionDirectory
from spellgame.fsm import SessionFSM
from spellgame.lock import SessionLocks
from spellgame.session_store import SessionRegistry
from spellgame.turn_processing.turns import resolve_submission
from spellgame.turn_processing.validators import ValidationContext, pipeline_for_action

logger = logging.getLogger(__name__)


class SpellingGameService:
    """Authoritative owner of every session's turn state.

    Each action runs under the session's lock and is handled to completion
    (mutate, save, broadcast, schedule) before the next one for that session.
    Rejected actions are logged and dropped; nothing is raised to callers.
    """

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        settings: Settings,
        directory: ConnectionDirectory | None = None,
        locks: SessionLocks | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.registry = registry
        self.settings = settings
        self.directory = directory or ConnectionDirectory()
        self.locks = locks or SessionLocks()
        self._rng = rng
        self._pending_draws: set[asyncio.Task[None]] = set()

    @property
    def pending_draws(self) -> tuple[asyncio.Task[None], ...]:
        return tuple(self._pending_draws)

    # ---- registry passthrough for HTTP plumbing ----

    def create_session(self) -> str:
        return self.registry.create()

    def get_session(self, session_id: str) -> SessionState | None:
        return self.registry.get(session_id)

    # ---- inbound actions ----

    async def join(
        self,
        session_id: str,
        player_id: str,
        player_name: str,
        channel: WebSocket | None = None,
    ) -> SessionState | None:
        async with self.locks.hold(session_id):
            state = self.registry.get(session_id)
            if state is None:
                logger.info("join dropped: unknown session_id=%s player_id=%s", session_id, player_id)
                return None
            try:
                pipeline_for_action("join").validate(
                    ctx=ValidationContext(session_id=session_id, player_id=player_id, action="join"), state=state
                )
            except ValueError as e:
                logger.info("join dropped session_id=%s player_id=%s: %s", session_id, player_id, e)
                return None

            existing = state.find_player(player_id)
            if existing is None:
                state.players.append(PlayerState(id=player_id, name=player_name, lives=self.settings.max_lives))
                logger.info("player joined session_id=%s player_id=%s", session_id, player_id)
            else:
                existing.name = player_name
                logger.info("player rejoined session_id=%s player_id=%s", session_id, player_id)

            if channel is not None:
                await self.directory.bind(player_id, channel)

            self.registry.save(state)
            await publish(state, self.directory)
            return state

    async def start(self, session_id: str) -> SessionState | None:
        async with self.locks.hold(session_id):
            state = self.registry.get(session_id)
            if state is None:
                logger.info("start dropped: unknown session_id=%s", session_id)
                return None
            try:
                pipeline_for_action("start").validate(
                    ctx=ValidationContext(session_id=session_id, player_id="", action="start"), state=state
                )
            except ValueError as e:
                logger.info("start dropped session_id=%s: %s", session_id, e)
                return None

            fsm = SessionFSM(state)
            fsm.begin()
            fsm.sync_phase_to_model()

            state.current_speller = state.players[0].id
            state.current_word = words.draw(self._rng)

            self.registry.save(state)
            logger.info("session started session_id=%s first_speller=%s", session_id, state.current_speller)
            await publish(state, self.directory)
            return state

    async def submit(self, session_id: str, player_id: str, spelling: str) -> SessionState | None:
        async with self.locks.hold(session_id):
            state = self.registry.get(session_id)
            if state is None:
                logger.info("submit dropped: unknown session_id=%s player_id=%s", session_id, player_id)
                return None
            try:
                pipeline_for_action("submit").validate(
                    ctx=ValidationContext(session_id=session_id, player_id=player_id, action="submit"), state=state
                )
            except ValueError as e:
                logger.info("submit dropped session_id=%s player_id=%s: %s", session_id, player_id, e)
                return None

            outcome = resolve_submission(state=state, player_id=player_id, spelling=spelling)
            logger.info(
                "submission resolved session_id=%s player_id=%s correct=%s",
                session_id,
                player_id,
                outcome.correct,
            )

            if outcome.eliminated_player_id is not None:
                logger.info("player eliminated session_id=%s player_id=%s", session_id, outcome.eliminated_player_id)
                await self.directory.unbind(outcome.eliminated_player_id)

            if outcome.session_over:
                await self._end_session(state)
                return None

            self.registry.save(state)
            await publish(state, self.directory)
            self._schedule_next_word(session_id)
            return state

    async def draw_next_word(self, session_id: str) -> SessionState | None:
        """Replace the current word, provided the session is still live and active."""

        async with self.locks.hold(session_id):
            state = self.registry.get(session_id)
            if state is None or state.phase != SessionPhase.active:
                logger.debug("next word skipped: session_id=%s no longer active", session_id)
                return None

            state.current_word = words.draw(self._rng)
            self.registry.save(state)
            await publish(state, self.directory)
            return state

    # ---- connection lifecycle ----

    async def handle_message(self, raw: str | bytes, channel: WebSocket | None = None) -> None:
        """Parse one inbound frame and dispatch it. Malformed frames are dropped."""

        try:
            msg = parse_inbound(raw)
        except ValidationError as e:
            logger.warning("dropping malformed frame (%d errors)", e.error_count())
            return

        try:
            if isinstance(msg, JoinMessage):
                await self.join(msg.session_id, msg.player_id, msg.player_name, channel=channel)
            elif isinstance(msg, StartMessage):
                await self.start(msg.session_id)
            elif isinstance(msg, SubmitMessage):
                await self.submit(msg.session_id, msg.player_id, msg.spelling)
        except redis.RedisError:
            logger.exception("session store unavailable; dropped %s for session_id=%s", msg.type, msg.session_id)

    async def disconnect(self, channel: WebSocket) -> None:
        released = await self.directory.release_channel(channel)
        if released:
            logger.info("channel closed; released player_ids=%s", ",".join(released))

    async def shutdown(self) -> None:
        tasks = list(self._pending_draws)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # ---- internals ----

    async def _end_session(self, state: SessionState) -> None:
        fsm = SessionFSM(state)
        fsm.finish()
        fsm.sync_phase_to_model()

        for p in state.players:
            await self.directory.unbind(p.id)
        self.registry.remove(state.session_id)
        logger.info("session ended session_id=%s", state.session_id)

    def _schedule_next_word(self, session_id: str) -> None:
        task = asyncio.create_task(self._draw_after_delay(session_id))
        self._pending_draws.add(task)
        task.add_done_callback(self._pending_draws.discard)

    async def _draw_after_delay(self, session_id: str) -> None:
        await asyncio.sleep(self.settings.next_word_delay_sec)
        try:
            await self.draw_next_word(session_id)
        except redis.RedisError:
            logger.exception("next word draw failed session_id=%s", session_id)
