"""
tablegen — schema-to-model code generator.
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tablegen import __version__
from tablegen.api import generate, health, inspect_table
from tablegen.config import settings
from tablegen.runtime import connection

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("tablegen")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("tablegen starting up…")
    yield
    connection.provider.dispose()
    logger.info("tablegen shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="tablegen — schema-to-model code generator",
    description="Reads table catalog metadata and writes typed data-access modules.",
    version=__version__,
    lifespan=lifespan,
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router,        prefix="/api")
app.include_router(inspect_table.router, prefix="/api")
app.include_router(generate.router,      prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("tablegen.main:app", host=settings.API_HOST, port=settings.API_PORT)
