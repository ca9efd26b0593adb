import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from squidgame.api.deps import get_settings, get_store
from squidgame.api.routes import router
from squidgame.config import load_env_file

load_env_file()

# Configure logging
logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Wake any worker still blocked on a prompt so its thread can exit.
    logger.info("closing open sessions")
    get_store().close_all()


app = FastAPI(title="squidgame", version="0.1.0", lifespan=lifespan)
app.include_router(router)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "squidgame", "version": "0.1.0"}
