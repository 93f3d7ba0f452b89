from fastapi import FastAPI
import logging

from dungeon_engine.api.routes import router
from dungeon_engine.settings import settings_from_env

app = FastAPI(title="dungeon-event-engine", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=settings_from_env().log_level)
logger = logging.getLogger(__name__)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "dungeon-event-engine", "version": "0.1.0"}
