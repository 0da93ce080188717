from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket
from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)


def is_open(websocket: WebSocket) -> bool:
    return (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    )


class ConnectionDirectory:
    """In-process map of player_id -> live WebSocket.

    Contract:
      - at most one channel per player id; `bind` overwrites.
      - `unbind` closes the channel and is idempotent.
      - shared by every session, so all access goes through one lock.
    """

    def __init__(self) -> None:
        self._by_player: dict[str, WebSocket] = {}
        self._lock = asyncio.Lock()

    async def bind(self, player_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            self._by_player[player_id] = websocket

    async def unbind(self, player_id: str) -> None:
        async with self._lock:
            websocket = self._by_player.pop(player_id, None)

        if websocket is None or not is_open(websocket):
            return
        try:
            await websocket.close()
        except Exception:
            logger.debug("close failed for player_id=%s", player_id, exc_info=True)

    async def discard(self, player_id: str, websocket: WebSocket) -> None:
        """Forget a dead binding without closing it, unless it was replaced meanwhile."""

        async with self._lock:
            if self._by_player.get(player_id) is websocket:
                self._by_player.pop(player_id, None)

    async def release_channel(self, websocket: WebSocket) -> list[str]:
        """Drop every binding that points at `websocket`; returns the player ids released."""

        async with self._lock:
            released = [pid for pid, ws in self._by_player.items() if ws is websocket]
            for pid in released:
                self._by_player.pop(pid, None)
        return released

    async def channel_for(self, player_id: str) -> WebSocket | None:
        async with self._lock:
            return self._by_player.get(player_id)
