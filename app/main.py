import logging
import time
from contextlib import asynccontextmanager
from uuid import uuid4

import uvicorn
from fastapi import FastAPI
from fastapi import Request
from starlette.exceptions import HTTPException

from app.api.v1.entries import router as entries_router
from app.core.config import Settings, settings as default_settings
from app.core.exceptions import (
    EntryNotFoundError,
    StoreError,
    entry_not_found_handler,
    http_exception_handler,
    store_error_handler,
)
from app.core.logging import setup_logging
from app.core.metrics import DogStatsdEmitter
from app.core.request_context import request_id_ctx_var
from app.db.session import EntryStore

logger = logging.getLogger("app.request")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = EntryStore(settings.database_url)
        store.initialize()
        metrics = DogStatsdEmitter.from_settings(settings)
        app.state.store = store
        app.state.metrics = metrics
        try:
            yield
        finally:
            metrics.close()
            store.dispose()

    app = FastAPI(title="Page View API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(EntryNotFoundError, entry_not_found_handler)
    app.add_exception_handler(StoreError, store_error_handler)

    app.include_router(entries_router)

    @app.middleware("http")
    async def observability_middleware(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid4())
        token = request_id_ctx_var.set(request_id)
        start = time.perf_counter()
        path = request.url.path
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - start
            logger.exception(
                "request_failed method=%s path=%s status=500 duration_ms=%.2f",
                method,
                path,
                elapsed * 1000,
            )
            request_id_ctx_var.reset(token)
            raise

        elapsed = time.perf_counter() - start
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request_completed method=%s path=%s status=%s duration_ms=%.2f",
            method,
            path,
            response.status_code,
            elapsed * 1000,
        )
        request_id_ctx_var.reset(token)
        return response

    return app


app = create_app()


def run(application: FastAPI = app) -> None:
    settings = application.state.settings
    uvicorn.run(application, host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    run()
