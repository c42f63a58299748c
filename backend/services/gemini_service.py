import httpx
from pydantic import ValidationError
from typing import Any, Optional

from config.settings import settings
from core.errors import EditError, EditErrorKind, EncodingError
from models.image_edit import (
    Candidate,
    EditRequest,
    EditResult,
    GenerationResponse,
    ImageBlob,
    InlineDataPart,
    TextPart,
)
from services.encoder_service import encode_image

MISSING_INPUT_MESSAGE = "Missing input: an image and an editing instruction are required"
NO_IMAGE_MESSAGE = "No image produced. The model might have refused the request."

def build_edit_request(blob: ImageBlob, instruction: str) -> EditRequest:
    """Encode the image and pair it with the instruction"""
    try:
        encoded = encode_image(blob)
    except EncodingError as error:
        raise EditError(EditErrorKind.ENCODE_FAILED, f"Failed to encode image: {error}") from error

    return EditRequest(image=encoded, instruction=instruction)

def _malformed(detail: str) -> EditError:
    return EditError(EditErrorKind.MALFORMED_RESPONSE, f"Unexpected response from Gemini API: {detail}")

def _parse_part(raw_part: Any):
    if not isinstance(raw_part, dict):
        raise _malformed("part is not an object")

    inline = raw_part["inlineData"] if "inlineData" in raw_part else raw_part.get("inline_data")
    if inline is not None and not isinstance(inline, dict):
        raise _malformed("inline data is not an object")
    if inline and inline.get("data"):
        data = inline["data"]
        if not isinstance(data, str):
            raise _malformed("inline data is not base64 text")
        mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
        return InlineDataPart(data=data, mime_type=mime_type)

    text = raw_part.get("text")
    if isinstance(text, str):
        return TextPart(text=text)

    # Other part kinds (function calls, empty parts) carry nothing we use
    return None

def parse_generation_response(data: Any) -> GenerationResponse:
    """Turn a generateContent JSON body into typed candidates and parts"""
    if not isinstance(data, dict):
        raise _malformed("expected a JSON object")

    raw_candidates = data.get("candidates") or []
    if not isinstance(raw_candidates, list):
        raise _malformed("candidates is not a list")

    try:
        return _build_generation_response(data, raw_candidates)
    except ValidationError as error:
        raise _malformed(f"unexpected field types ({error.error_count()} errors)") from error

def _build_generation_response(data: dict, raw_candidates: list) -> GenerationResponse:
    candidates = []
    for raw_candidate in raw_candidates:
        if not isinstance(raw_candidate, dict):
            raise _malformed("candidate is not an object")

        content = raw_candidate.get("content") or {}
        if not isinstance(content, dict):
            raise _malformed("candidate content is not an object")

        raw_parts = content.get("parts") or []
        if not isinstance(raw_parts, list):
            raise _malformed("candidate parts is not a list")

        parts = [part for part in (_parse_part(p) for p in raw_parts) if part is not None]
        candidates.append(Candidate(parts=parts, finish_reason=raw_candidate.get("finishReason")))

    block_reason = None
    prompt_feedback = data.get("promptFeedback")
    if isinstance(prompt_feedback, dict):
        block_reason = prompt_feedback.get("blockReason")

    return GenerationResponse(candidates=candidates, block_reason=block_reason)

def extract_first_image(response: GenerationResponse) -> EditResult:
    """Return the first inline image of the first candidate.

    Later candidates and any text commentary are ignored, even when they
    contain images of their own.
    """
    if not response.candidates:
        if response.block_reason:
            raise EditError(
                EditErrorKind.NO_IMAGE,
                f"No image produced. The request was blocked ({response.block_reason})."
            )
        raise EditError(EditErrorKind.NO_IMAGE, NO_IMAGE_MESSAGE)

    for part in response.candidates[0].parts:
        if isinstance(part, InlineDataPart):
            return EditResult(image_data=part.data, mime_type=part.mime_type)

    raise EditError(EditErrorKind.NO_IMAGE, NO_IMAGE_MESSAGE)

def _has_image(blob: Optional[ImageBlob]) -> bool:
    if blob is None or blob.source is None:
        return False
    if isinstance(blob.source, (bytes, bytearray, memoryview)):
        return len(blob.source) > 0
    return True

class GeminiService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.base_url = (base_url or settings.GEMINI_BASE_URL).rstrip('/')
        self.model = model or settings.GEMINI_MODEL
        self.timeout = timeout or settings.GEMINI_TIMEOUT_SECONDS
        self.transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def submit_edit(self, blob: Optional[ImageBlob], instruction: Optional[str]) -> str:
        """Edit an image and return the result as base64 text"""
        result = await self.generate_edit(blob, instruction)
        return result.image_data

    async def generate_edit(self, blob: Optional[ImageBlob], instruction: Optional[str]) -> EditResult:
        """Edit an image using Gemini, returning the first image it produces"""
        if not _has_image(blob) or not instruction or not instruction.strip():
            raise EditError(EditErrorKind.MISSING_INPUT, MISSING_INPUT_MESSAGE)

        try:
            request = build_edit_request(blob, instruction)
            if not request.image.data:
                raise EditError(EditErrorKind.MISSING_INPUT, MISSING_INPUT_MESSAGE)
            print(f"🔍 Submitting image edit to {self.model} ({request.image.mime_type})")

            data = await self._generate_content(request.to_payload())
            result = extract_first_image(parse_generation_response(data))
        except EditError as error:
            print(f"❌ Image edit failed [{error.kind.value}]: {error.message}")
            raise

        print(f"✅ Image edit completed ({result.mime_type})")
        return result

    async def _generate_content(self, payload: dict) -> Any:
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json"
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.endpoint, json=payload, headers=headers)
        except httpx.TimeoutException as error:
            raise EditError(
                EditErrorKind.TRANSPORT_FAILED,
                f"Request timeout - Gemini API did not respond within {self.timeout:g}s ({type(error).__name__})"
            ) from error
        except httpx.HTTPError as error:
            raise EditError(EditErrorKind.TRANSPORT_FAILED, f"Error calling Gemini API: {error}") from error

        if response.status_code != 200:
            raise EditError(EditErrorKind.TRANSPORT_FAILED, self._status_error_message(response))

        try:
            return response.json()
        except ValueError as error:
            raise _malformed(f"body is not JSON ({error})") from error

    @staticmethod
    def _status_error_message(response: httpx.Response) -> str:
        try:
            error_data = response.json() if response.content else {}
        except ValueError:
            error_data = {}

        error_info = error_data.get('error') if isinstance(error_data, dict) else None
        if isinstance(error_info, dict) and error_info.get('message'):
            return f"Gemini API error ({response.status_code}): {error_info['message']}"
        return f"API request failed: {response.status_code}"

async def submit_edit(image: Optional[ImageBlob], instruction: Optional[str]) -> str:
    """Edit an image with the configured Gemini model and return base64 image data"""
    return await GeminiService().submit_edit(image, instruction)
