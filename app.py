from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    load_dotenv("local.env")

    from dotdb import __version__
    from endpoints.data_endpoints import router as data_router
    from settings import get_settings

    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="dotdb", version=__version__)

    @app.get("/health")
    async def health():
        return JSONResponse(
            {
                "status": "ok",
                "version": __version__,
                "data_file": str(settings.data_file),
            }
        )

    app.include_router(data_router)

    logger.debug("APP: serving %s", settings.data_file)
    return app


app = create_app()
