from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from scriptdesk.config import Settings, get_settings
from scriptdesk.database import StorageEngine
from scriptdesk.errors import StorageFailure, ValidationFailure
from scriptdesk.middleware.logging import LoggingMiddleware
from scriptdesk.routers import scripts
from scriptdesk.services.repository import ScriptRepository
from scriptdesk.services.transfer import ScriptTransfer
import logging

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        storage = StorageEngine(
            settings.DATABASE_URL,
            echo=settings.SQL_ECHO,
            upgrade_legacy_schema=settings.UPGRADE_LEGACY_SCHEMA,
        )
        async with storage:
            repository = ScriptRepository(storage, case_sensitive=settings.SEARCH_CASE_SENSITIVE)
            app.state.storage = storage
            app.state.repository = repository
            app.state.transfer = ScriptTransfer(repository, encoding=settings.TEXT_ENCODING)
            logger.info(f"ScriptDesk ready (schema: {storage.generation.value})")
            yield

    app = FastAPI(
        title="ScriptDesk",
        version="1.0.0",
        lifespan=lifespan
    )

    app.add_middleware(LoggingMiddleware)
    app.include_router(scripts.router)

    @app.exception_handler(ValidationFailure)
    async def validation_failure_handler(request: Request, exc: ValidationFailure):
        return JSONResponse(status_code=422, content={"error": "validation_failure", "detail": str(exc)})

    @app.exception_handler(StorageFailure)
    async def storage_failure_handler(request: Request, exc: StorageFailure):
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "storage_failure", "detail": str(exc)})

    @app.get("/health")
    async def health_check(request: Request):
        return {"status": "healthy", "generation": request.app.state.storage.generation.value}

    return app


app = create_app()
