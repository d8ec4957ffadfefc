"""
Tillbook HTTP application.

Run with `uvicorn src.api.main:app` or `python -m src.api.main`.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from src.api.middleware.error_handler import setup_exception_handlers
from src.api.routes import health_router, invoices_router, products_router
from src.config import configure_logging, get_logger, get_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Bring the schema up to date and open the pool; close the pool on exit."""
    from src.infrastructure.storage.sqlite import close_pool, get_pool
    from src.infrastructure.storage.sqlite.migrations import run_migrations

    configure_logging()
    db_path = get_settings().storage.db_path
    logger.info("tillbook_starting", db_path=str(db_path))

    try:
        results = await run_migrations(db_path)
        failed = [r.version for r in results if not r.success]
        if failed:
            raise RuntimeError(f"Schema migration failed: {', '.join(failed)}")
        await get_pool()
    except Exception:
        logger.exception("tillbook_startup_failed", db_path=str(db_path))
        raise

    logger.info("tillbook_ready", migrations_applied=len(results))
    try:
        yield
    finally:
        await close_pool()
        logger.info("tillbook_stopped")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Tillbook Invoicing API",
        description="Product catalog and atomic, stock-checked invoice creation",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Response-Time"],
        )

    setup_exception_handlers(app)

    for router in (health_router, products_router, invoices_router):
        app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    api = get_settings().api
    uvicorn.run("src.api.main:app", host=api.host, port=api.port, reload=api.debug)
