from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request

from app.core.config import get_settings
from app.core.handlers import register_exception_handlers
from app.core.logging import configure_logging, get_logger
from app.db.session import SessionLocal
from app.repositories.status_repo import StatusRepository
from app.routers import countries, status

settings = get_settings()

configure_logging()
logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with SessionLocal() as session:
        await StatusRepository(session).ensure()
    logger.info("startup", service=settings.app_name, environment=settings.environment)
    yield


app = FastAPI(
    title=settings.app_name,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(countries.router, prefix=settings.api_prefix)
app.include_router(status.router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {"service": settings.app_name}


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    logger.info(
        "request",
        path=str(request.url.path),
        method=request.method,
        status_code=response.status_code,
        request_id=request_id,
    )
    response.headers["X-Request-ID"] = request_id
    return response
