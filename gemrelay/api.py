import asyncio
from typing import Any, Optional, Sequence

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from loguru import logger

from gemrelay.errors import (
    InvalidInputError,
    MissingFileError,
    ProviderError,
    RelayError,
    UnsupportedMediaTypeError,
)
from gemrelay.llm import PROVIDER_ERROR_MARKER, GenerativeModel
from gemrelay.mime import SUPPORTED_IMAGE_MIME_TYPES
from gemrelay.schemas import GenerationRequest, GenerationResponse, PromptRequest
from gemrelay.settings import Settings
from gemrelay.uploads import TemporaryUpload, UploadStore

DEFAULT_IMAGE_PROMPT = "Describe the image"
DOCUMENT_INSTRUCTION = "Analyze this document:"
AUDIO_INSTRUCTION = "Transcribe or analyze the following audio:"
PROMPT_REQUIRED = "Prompt is required."
UPLOAD_FIELDS = ("image", "document", "audio")

router = APIRouter()


def invalid_input_from_validation(path: str, errors: Sequence[Any]) -> InvalidInputError:
    """Map FastAPI request validation failures onto the relay's 400 errors.

    A non-file value under an upload field counts as a missing upload, and any
    malformed body on the text route counts as a missing prompt.
    """
    for error in errors:
        loc = error.get("loc") or ()
        if len(loc) > 1 and loc[-1] in UPLOAD_FIELDS:
            return MissingFileError(f"No {loc[-1]} file uploaded.")

    if path == "/generate-text":
        return InvalidInputError(PROMPT_REQUIRED)

    detail = errors[0].get("msg", "malformed input") if errors else "malformed input"
    return InvalidInputError(f"Invalid request: {detail}")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_model(request: Request) -> GenerativeModel:
    return request.app.state.model


def get_upload_store(request: Request) -> UploadStore:
    return request.app.state.uploads


async def _generate(model: GenerativeModel, request: GenerationRequest, timeout: float) -> str:
    """Run one model call bounded by *timeout*; any failure becomes ProviderError."""
    try:
        return await asyncio.wait_for(model.generate(request), timeout=timeout)
    except RelayError:
        raise
    except asyncio.TimeoutError as exc:
        raise ProviderError(f"Model call timed out after {timeout:g} seconds") from exc
    except Exception as exc:
        raise ProviderError(str(exc) or exc.__class__.__name__) from exc


async def _generate_from_upload(
    upload: TemporaryUpload, instruction: str, model: GenerativeModel, settings: Settings
) -> str:
    part = await upload.to_inline_part()
    return await _generate(model, GenerationRequest(prompt=instruction, part=part), settings.MODEL_TIMEOUT)


@router.post("/generate-text", response_model=GenerationResponse)
async def generate_text(
    body: PromptRequest,
    model: GenerativeModel = Depends(get_model),
    settings: Settings = Depends(get_settings),
):
    logger.info(f"Received /generate-text request: prompt_present={bool(body.prompt)}")
    if not body.prompt or not body.prompt.strip():
        raise InvalidInputError(PROMPT_REQUIRED)

    try:
        output = await _generate(model, GenerationRequest(prompt=body.prompt), settings.MODEL_TIMEOUT)
    except ProviderError as e:
        logger.error(f"Error generating text: {e}")
        raise
    return GenerationResponse(output=output)


@router.post("/generate-from-image", response_model=GenerationResponse)
async def generate_from_image(
    image: Optional[UploadFile] = File(None),
    prompt: Optional[str] = Form(None),
    model: GenerativeModel = Depends(get_model),
    uploads: UploadStore = Depends(get_upload_store),
    settings: Settings = Depends(get_settings),
):
    prompt = prompt or DEFAULT_IMAGE_PROMPT
    if image is None:
        raise MissingFileError("No image file uploaded.")

    async with uploads.temporary(image) as upload:
        logger.info(f"Received /generate-from-image request: file={upload.filename}, detected MIME type: {upload.mime_type}")

        if upload.mime_type not in SUPPORTED_IMAGE_MIME_TYPES:
            logger.error(f"Unsupported MIME type detected: {upload.mime_type}")
            raise UnsupportedMediaTypeError(
                f"Unsupported image format. Detected: {upload.mime_type}. "
                f"Supported: {', '.join(SUPPORTED_IMAGE_MIME_TYPES)}",
                data={"detected": upload.mime_type},
            )

        part = await upload.to_inline_part()
        try:
            output = await _generate(
                model, GenerationRequest(prompt=prompt, part=part), settings.MODEL_TIMEOUT
            )
        except ProviderError as e:
            logger.error(f"Error generating from image: {e}")
            if PROVIDER_ERROR_MARKER in e.message:
                raise ProviderError(f"AI Generation Error: {e.message}") from e
            raise

    return GenerationResponse(output=output)


@router.post("/generate-from-document", response_model=GenerationResponse)
async def generate_from_document(
    document: Optional[UploadFile] = File(None),
    model: GenerativeModel = Depends(get_model),
    uploads: UploadStore = Depends(get_upload_store),
    settings: Settings = Depends(get_settings),
):
    if document is None:
        raise MissingFileError("No document file uploaded.")

    async with uploads.temporary(document) as upload:
        # Any document type is forwarded; the model rejects what it cannot read.
        logger.info(f"Received /generate-from-document request: file={upload.filename}, MIME type: {upload.mime_type}")
        try:
            output = await _generate_from_upload(upload, DOCUMENT_INSTRUCTION, model, settings)
        except ProviderError as e:
            logger.error(f"Error generating from document: {e}")
            raise

    return GenerationResponse(output=output)


@router.post("/generate-from-audio", response_model=GenerationResponse)
async def generate_from_audio(
    audio: Optional[UploadFile] = File(None),
    model: GenerativeModel = Depends(get_model),
    uploads: UploadStore = Depends(get_upload_store),
    settings: Settings = Depends(get_settings),
):
    if audio is None:
        raise MissingFileError("No audio file uploaded.")

    async with uploads.temporary(audio) as upload:
        logger.info(f"Received /generate-from-audio request: file={upload.filename}, MIME type: {upload.mime_type}")
        try:
            output = await _generate_from_upload(upload, AUDIO_INSTRUCTION, model, settings)
        except ProviderError as e:
            logger.error(f"Error generating from audio: {e}")
            raise

    return GenerationResponse(output=output)


@router.get("/health")
def health_check():
    logger.info("Health check endpoint called.")
    return {"status": "ok"}
