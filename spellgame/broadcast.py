from __future__ import annotations

import logging

from spellgame.api.models import PlayerState, SessionState, UpdateMessage
from spellgame.connections import ConnectionDirectory, is_open

logger = logging.getLogger(__name__)


def build_update(state: SessionState) -> UpdateMessage:
    return UpdateMessage(
        players=[PlayerState(id=p.id, name=p.name, lives=p.lives) for p in state.players],
        current_word=state.current_word,
        current_speller=state.current_speller,
    )


async def publish(state: SessionState, directory: ConnectionDirectory) -> int:
    """Push the session snapshot to each of its players' open channels.

    Only the session's own players are addressed. Missing or closed channels
    are skipped; a failed send is logged and never retried. Returns how many
    channels received the update.
    """

    payload = build_update(state).to_wire()
    delivered = 0

    for player in state.players:
        ws = await directory.channel_for(player.id)
        if ws is None or not is_open(ws):
            continue
        try:
            await ws.send_json(payload)
        except Exception:
            logger.warning(
                "update send failed session_id=%s player_id=%s", state.session_id, player.id, exc_info=True
            )
            await directory.discard(player.id, ws)
            continue
        delivered += 1

    logger.debug("update published session_id=%s delivered=%d", state.session_id, delivered)
    return delivered
