import logging
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docsign.app.api.routes import router as pdf_router
from docsign.app.core.config import get_settings
from docsign.app.core.log_config import configure_logging

logger = logging.getLogger("docsign.main")


def get_app_version() -> str:
    """Resolve the installed distribution version, or the source default."""
    try:
        return version("docsign")
    except PackageNotFoundError:
        return "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Settings are validated once at startup; an invalid environment
    aborts startup instead of failing on the first request.
    """
    try:
        settings = get_settings()
    except Exception:
        logger.exception("invalid_docsign_configuration")
        raise

    configure_logging(settings.log_level)
    app.state.settings = settings

    logger.info(
        "docsign_startup",
        extra={
            "version": get_app_version(),
            "rsa_key_size": settings.rsa_key_size,
        },
    )

    try:
        yield
    finally:
        logger.info("docsign_shutdown")


def create_app() -> FastAPI:
    app = FastAPI(
        title="docsign",
        description="PDF digital signature service",
        version=get_app_version(),
        lifespan=lifespan,
    )

    app.include_router(pdf_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-PDF-Data", "X-Correlation-ID"],
    )
    return app


app = create_app()
