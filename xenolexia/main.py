"""FastAPI application factory."""
from __future__ import annotations

from typing import List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from xenolexia.api.v1.api import api_router
from xenolexia.config import settings
from xenolexia.utils.exceptions import (
    DatabaseError,
    DictionaryImportError,
    handle_database_error,
)


tags_metadata: List[dict[str, str]] = [
    {"name": "dictionary", "description": "Install, import and query word lists per language pair."},
    {"name": "vocabulary", "description": "Saved words, spaced-repetition reviews and exports."},
    {"name": "chapters", "description": "Turn chapter content into reader markup with foreign words."},
]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Learn a language by reading books with some words swapped for their translations.",
        version="0.1.0",
        openapi_tags=tags_metadata,
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors(), "message": "Validation failed"},
        )

    @app.exception_handler(DatabaseError)
    async def database_exception_handler(request: Request, exc: DatabaseError) -> JSONResponse:
        error = handle_database_error(exc)
        return JSONResponse(status_code=error.status_code, content={"detail": error.detail})

    @app.exception_handler(DictionaryImportError)
    async def import_exception_handler(request: Request, exc: DictionaryImportError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.message, "details": exc.details},
        )

    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
