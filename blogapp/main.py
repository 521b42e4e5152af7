import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from blogapp.api.posts import router as posts_router
from blogapp.api.taxonomy import router as taxonomy_router
from blogapp.api.uploads import router as uploads_router
from blogapp.config import get_settings
from blogapp.database import init_db
from blogapp.errors import (
    CatalogError,
    ConflictError,
    DependencyError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from blogapp.logging_config import configure_logging
from blogapp.schemas import format_errors

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    DependencyError: 409,
    StorageError: 503,
}


def status_for(error: CatalogError) -> int:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status_code
    return 500


def create_app(create_tables: bool = True) -> FastAPI:
    settings = get_settings()
    configure_logging()

    if create_tables:
        init_db()

    app = FastAPI(
        title="Blog Catalog",
        docs_url=None if settings.is_prod else "/docs",
        redoc_url=None if settings.is_prod else "/redoc"
    )

    app.include_router(posts_router)
    app.include_router(taxonomy_router)
    app.include_router(uploads_router)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationError("Invalid request data", {"errors": format_errors(exc.errors())})
        return JSONResponse(status_code=status_for(error), content=error.to_dict())

    return app


app = create_app()
