from fastapi import APIRouter, File, Form, UploadFile
from typing import Optional

from config.settings import settings
from core.errors import EditError, EditErrorKind, EncodingError
from models.image_edit import ImageBlob, ImageEditRequest, ImageEditResponse
from services.encoder_service import decode_image, parse_data_url
from services.gemini_service import GeminiService

router = APIRouter(prefix="/image-edit", tags=["image-edit"])

def get_gemini_service():
    return GeminiService()

def error_response(error: EditError) -> ImageEditResponse:
    return ImageEditResponse(
        success=False,
        error=error.message,
        error_kind=error.kind
    )

async def run_edit(blob: Optional[ImageBlob], prompt: Optional[str]) -> ImageEditResponse:
    """Run the edit pipeline and fold any failure into the response"""
    gemini_service = get_gemini_service()
    try:
        result = await gemini_service.generate_edit(blob, prompt)
    except EditError as error:
        return error_response(error)

    return ImageEditResponse(
        success=True,
        image_data=result.image_data,
        mime_type=result.mime_type,
        data_url=result.data_url
    )

@router.post("/", response_model=ImageEditResponse)
async def edit_image(
    file: Optional[UploadFile] = File(None),
    prompt: Optional[str] = Form(None)
):
    """Edit an uploaded image file using the configured Gemini model"""
    if file is None:
        return await run_edit(None, prompt)

    content_type = file.content_type or ""
    if content_type not in settings.ALLOWED_IMAGE_TYPES:
        return error_response(EditError(
            EditErrorKind.MISSING_INPUT,
            f"Unsupported image type: {content_type or 'unknown'}"
        ))

    # One extra byte is enough to detect an oversized upload
    contents = await file.read(settings.MAX_UPLOAD_SIZE + 1)
    if len(contents) > settings.MAX_UPLOAD_SIZE:
        return error_response(EditError(
            EditErrorKind.MISSING_INPUT,
            f"Image exceeds the {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB upload limit"
        ))

    return await run_edit(ImageBlob(source=contents, mime_type=content_type), prompt)

@router.post("/json", response_model=ImageEditResponse)
async def edit_image_from_data_url(edit_request: ImageEditRequest):
    """Edit an image sent as a base64 data URL"""
    try:
        encoded = parse_data_url(edit_request.image_data)
        blob = ImageBlob(source=decode_image(encoded.data), mime_type=encoded.mime_type)
    except EncodingError as error:
        return error_response(EditError(EditErrorKind.ENCODE_FAILED, f"Failed to encode image: {error}"))

    return await run_edit(blob, edit_request.prompt)

@router.get("/health")
async def check_gemini_config():
    """Check if Gemini is properly configured"""
    gemini_service = get_gemini_service()
    has_key = bool(gemini_service.api_key)

    return {
        "configured": has_key,
        "model": gemini_service.model,
        "message": "Gemini API key configured" if has_key else "Gemini API key not set"
    }
