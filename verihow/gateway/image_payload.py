import base64
import binascii
from dataclasses import dataclass

from verihow.core.errors import InputValidationError
from verihow.core.settings import settings


@dataclass(frozen=True)
class ImagePayload:
    """Decoded ``data:<mime>;base64,<payload>`` URL."""

    mime_type: str
    data: str
    size_bytes: int


def parse_image_data(image_data: str, max_bytes: int | None = None) -> ImagePayload:
    """
    Splits and validates an encoded-image data URL.

    Raises:
        InputValidationError: not an image data URL, bad base64 or too large
    """
    source = (image_data or "").strip()
    header, sep, data = source.partition(",")
    if not sep or not header.startswith("data:") or ";base64" not in header:
        raise InputValidationError("Invalid image payload. Please upload an image (JPG, PNG).")

    mime_type = header[len("data:") : header.index(";")].strip().lower()
    if not mime_type.startswith("image/"):
        raise InputValidationError("Invalid file type. Please upload an image (JPG, PNG).")

    try:
        decoded = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InputValidationError(f"Invalid image payload: {e}") from e

    limit = max_bytes if max_bytes is not None else settings.max_image_bytes
    if len(decoded) > limit:
        raise InputValidationError(
            f"File too large. Maximum size is {limit // (1024 * 1024)}MB."
        )
    return ImagePayload(mime_type=mime_type, data=data, size_bytes=len(decoded))
