import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from assistant import router as assistant_router
from auth import router as auth_router
from companies import router as companies_router
from core import cache, db
from core.errors import register_error_handlers
from resources import router as resources_router
from users import router as users_router


def _configure_logging() -> None:
    level = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return ["http://localhost:5173", "http://127.0.0.1:5173"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(_: FastAPI):
    # DB pool and cache backend are created once per process.
    await db.init_pool()
    await cache.init_cache()
    try:
        yield
    finally:
        await cache.close_cache()
        await db.close_pool()


_configure_logging()

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(auth_router.router, tags=["auth"])
app.include_router(users_router.router, tags=["users"])
app.include_router(companies_router.router, tags=["companies"])
app.include_router(resources_router.products_router, tags=["products"])
app.include_router(resources_router.projects_router, tags=["projects"])
app.include_router(resources_router.offers_router, tags=["offers"])
app.include_router(assistant_router.router, tags=["assistant"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "tenant-catalog api"}
