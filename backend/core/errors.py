from enum import Enum


class EditErrorKind(str, Enum):
    MISSING_INPUT = "missing_input"
    ENCODE_FAILED = "encode_failed"
    TRANSPORT_FAILED = "transport_failed"
    MALFORMED_RESPONSE = "malformed_response"
    NO_IMAGE = "no_image"


class EncodingError(Exception):
    """Raised when image bytes can't be read or encoded"""


class EditError(Exception):
    """Single error type surfaced by the edit pipeline.

    `kind` lets callers branch without matching on message text; `message`
    is safe to show to the user as-is.
    """

    def __init__(self, kind: EditErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"EditError({self.kind.value!r}, {self.message!r})"
