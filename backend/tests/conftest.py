"""
Shared pytest fixtures and configuration for all tests
"""
import base64
import os
import sys
from pathlib import Path

import httpx
import pytest

# Add backend to Python path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings refuse to load without a credential
os.environ.setdefault("GEMINI_API_KEY", "test-key")

TEST_BASE_URL = "https://gemini.test/v1beta"
TEST_MODEL = "gemini-2.5-flash-image"

@pytest.fixture
def png_bytes():
    """Provide a small PNG-looking byte string"""
    return b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"

@pytest.fixture
def image_blob(png_bytes):
    """Provide an ImageBlob wrapping the sample PNG bytes"""
    from models.image_edit import ImageBlob
    return ImageBlob(source=png_bytes, mime_type="image/png")

@pytest.fixture
def edited_image_data():
    """Base64 payload the simulated model returns"""
    return base64.b64encode(b"edited-image-bytes").decode("ascii")

def inline_part(data, mime_type="image/png"):
    return {"inlineData": {"mimeType": mime_type, "data": data}}

def text_part(text):
    return {"text": text}

def candidate(*parts):
    return {"content": {"role": "model", "parts": list(parts)}, "finishReason": "STOP"}

@pytest.fixture
def make_service():
    """Build a GeminiService whose HTTP traffic goes to a handler function.

    Returns (service, calls) where calls collects every request sent.
    """
    from services.gemini_service import GeminiService

    def _make(handler):
        calls = []

        async def recording_handler(request):
            calls.append(request)
            result = handler(request)
            if hasattr(result, "__await__"):
                result = await result
            return result

        service = GeminiService(
            api_key="test-key",
            base_url=TEST_BASE_URL,
            model=TEST_MODEL,
            timeout=5.0,
            transport=httpx.MockTransport(recording_handler)
        )
        return service, calls

    return _make

@pytest.fixture
def respond_with():
    """Build a handler that answers every request with the given JSON body"""
    def _respond(body, status_code=200):
        def handler(request):
            return httpx.Response(status_code, json=body)
        return handler
    return _respond
