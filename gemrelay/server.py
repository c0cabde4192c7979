"""FastAPI application factory for the relay."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from gemrelay.api import invalid_input_from_validation, router
from gemrelay.errors import RelayError
from gemrelay.llm import GeminiModel, GenerativeModel
from gemrelay.schemas import ErrorResponse
from gemrelay.settings import Settings
from gemrelay.settings import settings as default_settings
from gemrelay.uploads import UploadStore


def create_app(
    settings: Settings | None = None,
    model: GenerativeModel | None = None,
    uploads: UploadStore | None = None,
) -> FastAPI:
    """Build the relay app.

    *model* and *uploads* are constructed from *settings* when not supplied;
    tests pass their own doubles instead.
    """
    settings = settings or default_settings

    app = FastAPI(title="Gemini Relay", version="0.1.0")
    app.state.settings = settings
    app.state.model = model or GeminiModel.from_settings(settings)
    app.state.uploads = uploads or UploadStore(settings.UPLOAD_DIR)
    app.include_router(router)

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
        logger.debug(f"{request.method} {request.url.path} failed: {exc.to_dict()}")
        return JSONResponse(status_code=exc.http_status, content=ErrorResponse(error=exc.message).model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info(f"Rejected malformed {request.method} {request.url.path}: {exc.errors()}")
        return await relay_error_handler(request, invalid_input_from_validation(request.url.path, exc.errors()))

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down, closing model client...")
        await app.state.model.aclose()

    return app
