from __future__ import annotations

import os
import random
from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import Any

import fakeredis
import pytest
import pytest_asyncio
from starlette.websockets import WebSocketState

from spellgame.config import Settings
from spellgame.game_service import SpellingGameService
from spellgame.session_store import SessionRegistry


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs (PyCharm/CLI).

    In CI, we *don't* auto-load `.env` by default.
    Opt-in locally with: SPELLGAME_LOAD_DOTENV_FOR_TESTS=1
    """

    if os.environ.get("CI") and os.environ.get("SPELLGAME_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


class FakeChannel:
    """Stands in for a starlette WebSocket in service/broadcast tests."""

    def __init__(self, *, fail_sends: bool = False) -> None:
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self.fail_sends = fail_sends
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_json(self, data: dict[str, Any]) -> None:
        if self.fail_sends:
            raise RuntimeError("connection reset")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed = True
        self.client_state = WebSocketState.DISCONNECTED
        self.application_state = WebSocketState.DISCONNECTED

    @property
    def last(self) -> dict[str, Any]:
        return self.sent[-1]


@pytest.fixture()
def fake_redis() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def registry(fake_redis: fakeredis.FakeRedis) -> SessionRegistry:
    return SessionRegistry(r=fake_redis)


def make_service(registry: SessionRegistry, *, delay: float = 3600.0) -> SpellingGameService:
    # A long delay keeps deferred draws out of the way unless a test waits for them.
    settings = Settings(next_word_delay_sec=delay)
    return SpellingGameService(registry=registry, settings=settings, rng=random.Random(1234))


@pytest_asyncio.fixture()
async def service(registry: SessionRegistry) -> AsyncGenerator[SpellingGameService, None]:
    svc = make_service(registry)
    yield svc
    await svc.shutdown()


@pytest_asyncio.fixture()
async def fast_service(registry: SessionRegistry) -> AsyncGenerator[SpellingGameService, None]:
    svc = make_service(registry, delay=0.0)
    yield svc
    await svc.shutdown()


@pytest.fixture()
def client(registry: SessionRegistry) -> Generator[Any, None, None]:
    """FastAPI TestClient wired to a fakeredis-backed game service."""

    from fastapi.testclient import TestClient

    from spellgame.api.deps import get_game_service
    from spellgame.main import app

    svc = make_service(registry)
    app.dependency_overrides[get_game_service] = lambda: svc
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def channel_factory() -> type[FakeChannel]:
    return FakeChannel
