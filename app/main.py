from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.infrastructure.db.pool import close_pool, get_pool
from app.infrastructure.redis_cache.pool import close_redis, get_redis
from app.logging import setup_logging
from app.presentation.api import api
from app.presentation.dependencies import build_request_gate
from app.presentation.errors import install_error_handlers
from app.presentation.middleware import RequestGateMiddleware
from app.settings import get_settings

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    pool = get_pool()
    await pool.open()
    get_redis()

    try:
        yield
    finally:
        # shutdown
        await close_redis()
        await close_pool()


def create_app() -> FastAPI:
    setup_logging(settings.log_level)
    app = FastAPI(title="Auth & Session API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    # Swapped for a gate over fakes in tests
    app.state.request_gate = build_request_gate()
    app.add_middleware(RequestGateMiddleware)
    install_error_handlers(app)
    app.include_router(api)
    return app


app = create_app()
