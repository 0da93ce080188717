from fastapi import FastAPI
import logging

from spellgame.api.deps import current_game_service, get_game_service
from spellgame.api.routes import router
from spellgame.config import settings_from_env

app = FastAPI(title="spellgame", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=settings_from_env().log_level)
logger = logging.getLogger(__name__)


@app.on_event("shutdown")
async def _shutdown() -> None:
    override = app.dependency_overrides.get(get_game_service)
    service = override() if override is not None else current_game_service()
    if service is None:
        return
    await service.shutdown()


@app.get("/")
@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "spellgame", "version": "0.1.0"}
