"""
LexAdvisor ASGI application.

Startup creates any missing tables when ``INIT_MODE`` is ``runtime``;
shutdown disposes of the engine pool. Logging level comes from
``LOG_LEVEL``, the single allowed CORS origin from ``FRONTEND_URL``.

The API lives under ``/api``. When a built frontend exists under
``frontend/dist`` its assets are served and every other path falls back to
``index.html`` so client-side routes (``/chat``, ``/documents``, ...)
survive a reload.

Run with ``uvicorn lexadvisor.main:app``.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from lexadvisor.api.fast_api import router
from lexadvisor.database.config.config import settings
from lexadvisor.database.config.connection_engine import connection_engine, metadata
import lexadvisor.database.entities  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("uvicorn")

FRONTEND_DIST = os.path.join("frontend", "dist")
ASSETS_DIR = os.path.join(FRONTEND_DIST, "assets")
API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.INIT_MODE == "runtime":
        metadata.create_all(connection_engine)
        logger.info("Database schema ready.")
    else:
        logger.info(f"Skipping schema creation (INIT_MODE={settings.INIT_MODE}).")
    try:
        yield
    finally:
        connection_engine.dispose()
        logger.info("LexAdvisor stopped.")


app = FastAPI(title="LexAdvisor", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix=API_PREFIX)

if os.path.isdir(ASSETS_DIR):
    app.mount("/assets", StaticFiles(directory=ASSETS_DIR), name="assets")


# Registered last so it never shadows an API route.
@app.get("/")
@app.get("/{full_path:path}")
async def frontend(full_path: str = ""):
    """index.html of the built frontend for any non-API path."""
    if f"/{full_path}".startswith(API_PREFIX + "/"):
        raise HTTPException(status_code=404, detail="Not Found")
    index = os.path.join(FRONTEND_DIST, "index.html")
    if not os.path.isfile(index):
        raise HTTPException(status_code=404, detail="Frontend build not found")
    return FileResponse(index)
