"""
serves3 gateway - Browse an S3 compatible bucket over HTTP
Backend: FastAPI
"""

import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from s3gateway.config import Settings, load_settings
from s3gateway.exceptions import GatewayError
from s3gateway.logging_config import get_logger, setup_logging
from s3gateway.resolver import PathResolver
from s3gateway.routers import browse
from s3gateway.store import BucketStore


def create_app(settings: Optional[Settings] = None, store=None) -> FastAPI:
    """Build the application.

    Settings are loaded from the environment when not given. A store can be
    injected; otherwise one is built from the settings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        nonlocal settings
        if settings is None:
            settings = load_settings()

        setup_logging(settings.log_level, settings.is_development)
        logger = get_logger(__name__)

        logger.info("Application startup initiated")
        owns_store = False
        if getattr(app.state, "resolver", None) is None:
            bucket_store = BucketStore.from_settings(settings)
            app.state.resolver = PathResolver(bucket_store)
            owns_store = True

        describe = getattr(app.state.resolver.store, "describe", None)
        if describe is not None:
            logger.info(f"Serving contents from {describe()}", extra={"operation": "startup"})
        logger.info("Application startup complete")
        yield

        logger.info("Application shutdown initiated")
        if owns_store:
            app.state.resolver.store.close()

    app = FastAPI(
        title="serves3",
        description="Browse an S3 compatible bucket as a file tree",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan
    )

    if store is not None:
        app.state.resolver = PathResolver(store)

    app.include_router(browse.router)

    @app.exception_handler(GatewayError)
    async def gateway_exception_handler(request: Request, exc: GatewayError):
        logger = get_logger(__name__)
        log = logger.info if exc.status_code < 500 else logger.error
        log(
            f"{request.method} /{exc.path}: {exc.message}",
            extra={"path": exc.path, "status_code": exc.status_code, "error_type": type(exc).__name__}
        )
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger = get_logger(__name__)
        tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        logger.error(f"Unhandled exception: {exc}\n{tb_str}")

        return JSONResponse(
            status_code=500,
            content={
                "detail": "An internal server error occurred",
                "error_type": type(exc).__name__,
                "error_message": str(exc)
            }
        )

    return app


def main():
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.address,
        port=settings.port,
        log_config=None
    )


if __name__ == "__main__":
    main()
