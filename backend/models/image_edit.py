from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, BinaryIO, List, Literal, Optional, Union
from dataclasses import dataclass

from core.errors import EditErrorKind

@dataclass(frozen=True)
class ImageBlob:
    """Caller-owned image source: raw bytes or a readable binary file object"""
    source: Union[bytes, bytearray, memoryview, BinaryIO]
    mime_type: str

class EncodedImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: str  # Standard base64, no line breaks
    mime_type: str

class EditRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    image: EncodedImage
    instruction: str

    def to_payload(self) -> dict:
        """Serialize to a generateContent request body"""
        return {
            "contents": [{
                "role": "user",
                "parts": [
                    {
                        "inlineData": {
                            "mimeType": self.image.mime_type,
                            "data": self.image.data
                        }
                    },
                    {
                        "text": self.instruction
                    }
                ]
            }],
            "generationConfig": {
                "responseModalities": ["IMAGE", "TEXT"]
            }
        }

# Response parts are a tagged variant: inline image data or text
class InlineDataPart(BaseModel):
    kind: Literal["inline_data"] = "inline_data"
    data: str
    mime_type: str

class TextPart(BaseModel):
    kind: Literal["text"] = "text"
    text: str

ResponsePart = Annotated[Union[InlineDataPart, TextPart], Field(discriminator="kind")]

class Candidate(BaseModel):
    parts: List[ResponsePart] = []
    finish_reason: Optional[str] = None

class GenerationResponse(BaseModel):
    candidates: List[Candidate] = []
    block_reason: Optional[str] = None

class EditResult(BaseModel):
    image_data: str  # Base64 encoded image
    mime_type: str

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.image_data}"

# API payloads
class ImageEditRequest(BaseModel):
    image_data: str  # Data URL, e.g. data:image/png;base64,...
    prompt: str

class ImageEditResponse(BaseModel):
    success: bool
    image_data: Optional[str] = None
    mime_type: Optional[str] = None
    data_url: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[EditErrorKind] = None
