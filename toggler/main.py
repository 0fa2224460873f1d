"""Main module of the Toggler FastAPI application.

Mounts the API routers and translates domain exceptions into HTTP
responses.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from toggler.api.v1.api import api_router
from toggler.core.config import settings
from toggler.core.exceptions import TogglerException
from toggler.core.logging import logger
from toggler.core.redis_client import redis_client
from toggler.db.init_db import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the schema on local setups and close the bus connection on shutdown."""
    if settings.LOCAL_DEVELOPMENT or settings.is_sqlite:
        await init_db()
    yield
    await redis_client.close()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)


@app.exception_handler(TogglerException)
async def toggler_exception_handler(request: Request, exc: TogglerException) -> JSONResponse:
    """Map domain exceptions to their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    else:
        logger.debug(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "healthy"}


app.include_router(api_router, prefix=settings.API_PREFIX)
