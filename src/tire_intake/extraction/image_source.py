"""
Image input classification.

Callers hand the extractors either raw image bytes or a base64 string
(optionally a `data:image/...;base64,` URL). Both shapes are resolved once,
here, into a MIME type plus raw bytes.
"""

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Union

from tire_intake.core.errors import InvalidInputError

DEFAULT_MIME_TYPE = "image/jpeg"

PNG_SIGNATURE = b"\x89P"

_DATA_URL_RE = re.compile(r"^data:(image/\w+);base64,")


@dataclass(frozen=True)
class BinaryImage:
    """Raw image bytes as read from a file or download."""
    data: bytes


@dataclass(frozen=True)
class DataUrlImage:
    """Base64 text, with or without a data-URL header."""
    text: str


ImageSource = Union[BinaryImage, DataUrlImage]


@dataclass(frozen=True)
class ResolvedImage:
    mime_type: str
    data: bytes

    def to_base64(self) -> str:
        return base64.standard_b64encode(self.data).decode("utf-8")


def classify(image_input) -> ImageSource:
    """Tag a caller-supplied image as binary or base64 text."""
    if isinstance(image_input, (BinaryImage, DataUrlImage)):
        return image_input
    if isinstance(image_input, (bytes, bytearray, memoryview)):
        return BinaryImage(bytes(image_input))
    if isinstance(image_input, str):
        return DataUrlImage(image_input)
    raise InvalidInputError(
        f"Image must be bytes or a base64 string, got {type(image_input).__name__}"
    )


def sniff_mime_type(data: bytes) -> str:
    """PNG when the magic bytes say so, JPEG otherwise."""
    if data[:2] == PNG_SIGNATURE:
        return "image/png"
    return DEFAULT_MIME_TYPE


def resolve(image_input) -> ResolvedImage:
    """
    Resolve any accepted image shape to (mime_type, bytes).

    Raises:
        InvalidInputError: unsupported type, or base64 text that does not decode
    """
    source = classify(image_input)

    if isinstance(source, BinaryImage):
        return ResolvedImage(mime_type=sniff_mime_type(source.data), data=source.data)

    text = source.text.strip()
    mime_type = DEFAULT_MIME_TYPE
    match = _DATA_URL_RE.match(text)
    if match:
        mime_type = match.group(1)
        text = text[match.end():]
    text = re.sub(r"\s+", "", text)

    try:
        data = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError(f"Image string is not valid base64: {e}") from e

    return ResolvedImage(mime_type=mime_type, data=data)
