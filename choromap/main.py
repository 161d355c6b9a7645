"""ChoroMap static host: FastAPI application entry point.

Run with:  python -m choromap.main
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from choromap import config
from choromap.api.routes import router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Serving %s", config.PUBLIC_DIR)
    if config.MAP_COLLECTION_DIR.is_dir():
        logger.info("Map collection mounted at %s", config.MAP_COLLECTION_PREFIX)
    else:
        logger.warning("Map collection missing: %s", config.MAP_COLLECTION_DIR)
    logger.info("App listening at http://localhost:%d", config.PORT)
    yield
    logger.info("Shutting down ChoroMap host.")


def create_app() -> FastAPI:
    app = FastAPI(
        title="ChoroMap",
        description="Static host for choropleth datasets and map topologies.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    if config.MAP_COLLECTION_DIR.is_dir():
        app.mount(
            config.MAP_COLLECTION_PREFIX,
            StaticFiles(directory=config.MAP_COLLECTION_DIR),
            name="map-collection",
        )
    # Last: catches every path the routes above did not claim.
    app.mount("/", StaticFiles(directory=config.PUBLIC_DIR, check_dir=False), name="public")
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=config.HOST, port=config.PORT)
