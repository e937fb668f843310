import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trustai.config import Settings
from trustai.core.errors import (
    AdapterError,
    BatchInProgressError,
    NoContentError,
    NotFoundError,
    PayloadTooLargeError,
    ReportInProgressError,
    ValidationError,
)
from trustai.core.schema import ErrorResponse
from trustai.infrastructure import GroqClient, configure_adapters
from trustai.logging_setup import configure_logging
from trustai.routes import media, projects, sessions

logger = logging.getLogger(__name__)

# (exception type, status code, error label); the most specific registered class handles an error
ERROR_RESPONSES: list[tuple[type[Exception], int, str]] = [
    (PayloadTooLargeError, 413, "Upload too large"),
    (ValidationError, 400, "Invalid request"),
    (NoContentError, 400, "No content provided to generate the report"),
    (NotFoundError, 404, "Not found"),
    (BatchInProgressError, 409, "Processing already in progress"),
    (ReportInProgressError, 409, "Report generation already in progress"),
    (AdapterError, 502, "Upstream AI service failed"),
]


def error_response(status_code: int, error: str, details: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=error, details=details).model_dump())


def install_adapters(settings: Settings) -> None:
    if not settings.is_configured:
        logger.warning("GROQ_API_KEY not set; transcription and extraction return placeholders")
        configure_adapters()
        return
    client = GroqClient(
        settings.groq_api_key,
        api_base=settings.groq_api_base,
        transcription_model=settings.transcription_model,
        vision_model=settings.vision_model,
        report_model=settings.report_model,
        language=settings.language,
        timeout=settings.request_timeout,
    )
    configure_adapters(transcription=client, extraction=client, report=client)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="Trust AI Transcription API", version="0.1.0")
    app.state.settings = settings
    install_adapters(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for exc_type, status_code, label in ERROR_RESPONSES:

        async def handler(request: Request, exc: Exception, status_code=status_code, label=label) -> JSONResponse:
            return error_response(status_code, label, str(exc))

        app.add_exception_handler(exc_type, handler)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}" for error in exc.errors()
        )
        return error_response(400, "Invalid request", details)

    app.include_router(media.router, prefix="/api")
    app.include_router(sessions.router, prefix="/api")
    app.include_router(projects.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Trust AI Transcription API",
                "docs": "/docs",
                "configured": settings.is_configured,
            }
        )

    return app


app = create_app()
