"""Core infrastructure: configuration, errors, schema, normalization."""

from tire_intake.core.config import (
    validate_config,
    get_config_summary,
    get_api_key,
    OUTPUT_DIR,
)
from tire_intake.core.errors import (
    TireIntakeError,
    MissingCredentialError,
    InvalidInputError,
    EmptyModelResponseError,
    ModelRequestError,
    MalformedResponseError,
    EngineFailureError,
)
from tire_intake.core.schema import ExtractedRow, StockEntry
from tire_intake.core.normalizer import SELLING_MARKUP, normalize_row, normalize_size

__all__ = [
    "validate_config",
    "get_config_summary",
    "get_api_key",
    "OUTPUT_DIR",
    "TireIntakeError",
    "MissingCredentialError",
    "InvalidInputError",
    "EmptyModelResponseError",
    "ModelRequestError",
    "MalformedResponseError",
    "EngineFailureError",
    "ExtractedRow",
    "StockEntry",
    "SELLING_MARKUP",
    "normalize_row",
    "normalize_size",
]
