from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI

from app.api.routes.documents import router as documents_router
from app.core.config import settings
from app.core.logging import setup_logging
from app.dependencies import Container

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.container = Container()
    try:
        yield
    finally:
        await app.state.container.close()


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.include_router(documents_router)


@app.get("/")
async def root() -> Dict[str, str]:
    return {"service": settings.app_name, "status": "running"}
