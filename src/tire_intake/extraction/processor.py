#!/usr/bin/env python3
"""
Cloud Table Extractor - Read tire price-list photos with a multimodal Claude model.

The image and a structured-extraction prompt are sent in a single request.
The model answers with text that should be a bare JSON array; the array is
isolated from any surrounding prose or code fences, parsed, and every
element is passed through row normalization.

Usage:
    from tire_intake.extraction.processor import extract_table_from_image

    rows = extract_table_from_image(Path("photo.jpg").read_bytes())
"""

import json
import logging
from typing import Any, List, Optional

from anthropic import Anthropic, APIError, APIStatusError

from tire_intake.core import config
from tire_intake.core.errors import (
    EmptyModelResponseError,
    MalformedResponseError,
    MissingCredentialError,
    ModelRequestError,
)
from tire_intake.core.normalizer import accept_cloud_row, normalize_row
from tire_intake.core.schema import ExtractedRow
from tire_intake.extraction.image_source import ResolvedImage, resolve
from tire_intake.extraction.prompts import TABLE_EXTRACTION_PROMPT

logger = logging.getLogger(__name__)


# =============================================================================
# Response Parsing
# =============================================================================

def isolate_json_array(response_text: str) -> str:
    """
    Cut a response down to the span from the first "[" to the last "]".

    Text without brackets is returned unchanged so that the JSON parser
    reports the failure.
    """
    start = response_text.find("[")
    if start != -1:
        response_text = response_text[start:]
    end = response_text.rfind("]")
    if end != -1:
        response_text = response_text[:end + 1]
    return response_text


def extract_json_array_from_response(response_text: str) -> List[Any]:
    """
    Extract the JSON array from the model's response.

    Args:
        response_text: Raw response text from the model

    Returns:
        The decoded list

    Raises:
        MalformedResponseError: If the isolated text is not JSON or not an array
    """
    isolated = isolate_json_array(response_text.strip())

    try:
        rows = json.loads(isolated)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(
            f"Failed to parse JSON from model response: {e}\nResponse: {response_text[:500]}...",
            reason=str(e),
        ) from e

    if not isinstance(rows, list):
        raise MalformedResponseError(
            f"Model response is not a JSON array (got {type(rows).__name__})",
            reason="not an array",
        )

    return rows


def response_text(response: Any) -> str:
    """Join the text blocks of a Messages API response."""
    blocks = getattr(response, "content", None) or []
    parts = [getattr(block, "text", None) for block in blocks if getattr(block, "type", None) == "text"]
    return "".join(part for part in parts if isinstance(part, str))


def normalize_rows(raw_rows: List[Any]) -> List[ExtractedRow]:
    """Normalize decoded rows, dropping any that break the row invariants."""
    rows = []
    for raw in raw_rows:
        if not isinstance(raw, dict):
            logger.warning(f"Skipping non-object element in model output: {raw!r}")
            continue
        row = accept_cloud_row(normalize_row(raw))
        if row is not None:
            rows.append(row)
    return rows


# =============================================================================
# Core Processing
# =============================================================================

def create_client(api_key: Optional[str] = None) -> Anthropic:
    """
    Build an Anthropic client for the cloud extractor.

    Raises:
        MissingCredentialError: If no key is passed and none is configured
    """
    key = config.get_api_key(api_key)
    if not key:
        raise MissingCredentialError(
            "ANTHROPIC_API_KEY is required (set it in the environment or pass api_key)."
        )
    return Anthropic(
        api_key=key,
        timeout=config.CLOUD_TIMEOUT_SECONDS,
        max_retries=config.CLOUD_MAX_RETRIES,
    )


def build_messages(image: ResolvedImage) -> List[dict]:
    """Single user turn: the image followed by the extraction instructions."""
    return [
        {
            "role": "user",
            "content": [
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": image.mime_type,
                        "data": image.to_base64(),
                    },
                },
                {
                    "type": "text",
                    "text": TABLE_EXTRACTION_PROMPT,
                },
            ],
        }
    ]


def extract_table_from_image(
    image_input,
    api_key: Optional[str] = None,
    client: Optional[Anthropic] = None,
    model: Optional[str] = None,
    max_tokens: Optional[int] = None,
) -> List[ExtractedRow]:
    """
    Extract table rows from a price-list photo using the cloud model.

    Args:
        image_input: Raw image bytes or a base64 / data-URL string
        api_key: Anthropic API key (falls back to ANTHROPIC_API_KEY)
        client: Pre-built Anthropic client; skips credential lookup
        model: Model ID (default: config.MODEL_ID)
        max_tokens: Maximum response tokens (default: config.MAX_TOKENS)

    Returns:
        Normalized rows, possibly empty

    Raises:
        MissingCredentialError: No API key available
        InvalidInputError: image_input is not bytes or a base64 string
        ModelRequestError: The API call failed (network, auth, rate limit, timeout)
        EmptyModelResponseError: The model returned no text
        MalformedResponseError: The response holds no parsable JSON array
    """
    if client is None:
        client = create_client(api_key)

    image = resolve(image_input)
    model = model or config.MODEL_ID

    logger.info(f"Sending {image.mime_type} image ({len(image.data)} bytes) to {model}")

    try:
        response = client.messages.create(
            model=model,
            max_tokens=max_tokens or config.MAX_TOKENS,
            messages=build_messages(image),
        )
    except APIStatusError as e:
        raise ModelRequestError(
            f"Model request failed with HTTP {e.status_code}: {e.message}",
            status_code=e.status_code,
        ) from e
    except APIError as e:
        raise ModelRequestError(f"Model request failed: {e.message}") from e

    text = response_text(response)
    if not text.strip():
        raise EmptyModelResponseError("Model returned no text for the image.")

    logger.debug(f"Model response: {len(text)} characters")

    rows = normalize_rows(extract_json_array_from_response(text))
    logger.info(f"Extracted {len(rows)} rows with the cloud model")
    return rows
