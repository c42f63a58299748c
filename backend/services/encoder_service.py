import base64
import binascii
from typing import Union

from core.errors import EncodingError
from models.image_edit import EncodedImage, ImageBlob

def encode_image(blob: ImageBlob) -> EncodedImage:
    """Read an image blob fully and encode it as standard base64.

    File objects are read from their current position and left open.
    The declared mime type is passed through unchanged.
    """
    try:
        source = blob.source
        if isinstance(source, (bytes, bytearray, memoryview)):
            raw = bytes(source)
        else:
            read = getattr(source, "read", None)
            if not callable(read):
                raise EncodingError(f"Could not read image: {type(source).__name__} is not a binary file or bytes")
            raw = read()
    except (OSError, ValueError) as error:
        raise EncodingError(f"Could not read image: {error}") from error

    if not isinstance(raw, (bytes, bytearray)):
        raise EncodingError(f"Could not read image: expected bytes, got {type(raw).__name__}")

    return EncodedImage(
        data=base64.b64encode(raw).decode("ascii"),
        mime_type=blob.mime_type
    )

def decode_image(data: Union[str, bytes]) -> bytes:
    """Decode standard base64 image data, rejecting anything malformed"""
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as error:
        raise EncodingError(f"Invalid base64 image data: {error}") from error

def parse_data_url(data_url: str) -> EncodedImage:
    """Split a `data:<mime>;base64,<payload>` URL into an EncodedImage"""
    if not data_url.startswith("data:") or "," not in data_url:
        raise EncodingError("Invalid data URL format")

    header, payload = data_url.split(",", 1)
    media = header[len("data:"):]
    if not media.endswith(";base64"):
        raise EncodingError("Data URL is not base64 encoded")

    mime_type = media[:-len(";base64")]
    if not mime_type:
        raise EncodingError("Data URL has no media type")

    # Validates the payload
    decode_image(payload)
    return EncodedImage(data=payload, mime_type=mime_type)
