"""Main FastAPI application."""

import logging

from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware

from ..config import load_config
from .routes import indexing, search


def create_app() -> FastAPI:
    cfg = load_config()
    logging.basicConfig(
        level=cfg["log_level"].upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="coderag", version=cfg["version"])

    # Setup CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_router = APIRouter(prefix="/api")
    api_router.include_router(indexing.router)
    api_router.include_router(search.router)
    app.include_router(api_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": cfg["version"]}

    return app


app = create_app()
