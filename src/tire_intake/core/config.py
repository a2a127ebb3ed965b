#!/usr/bin/env python3
"""
Configuration for tire stock-list extraction.
Handles environment variable loading and validation.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


# =============================================================================
# Cloud Table Extractor
# =============================================================================

ANTHROPIC_API_KEY: Optional[str] = os.getenv("ANTHROPIC_API_KEY")

# Multimodal model used to read price-list photos
MODEL_ID: str = os.getenv("MODEL_ID", "claude-opus-4-5-20251101")

# Maximum tokens for the model's JSON answer
MAX_TOKENS: int = int(os.getenv("MAX_TOKENS", "8192"))

# Single request per extraction; the SDK's own retry loop is off by default
CLOUD_TIMEOUT_SECONDS: float = float(os.getenv("CLOUD_TIMEOUT_SECONDS", "120"))
CLOUD_MAX_RETRIES: int = int(os.getenv("CLOUD_MAX_RETRIES", "0"))


# =============================================================================
# Local OCR Table Parser
# =============================================================================

# Explicit tesseract binary (leave unset to use PATH)
TESSERACT_CMD: Optional[str] = os.getenv("TESSERACT_CMD")

TESSERACT_LANG: str = os.getenv("TESSERACT_LANG", "eng")

# PSM 6 = assume a single uniform block of text (table rows run together)
TESSERACT_PSM: str = os.getenv("TESSERACT_PSM", "6")


# =============================================================================
# Output Configuration
# =============================================================================

OUTPUT_DIR: str = os.getenv("OUTPUT_DIR", "output")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

ENGINES = ("cloud", "local")


def get_api_key(explicit: Optional[str] = None) -> Optional[str]:
    """
    Resolve the cloud credential.

    An explicit argument wins; otherwise the environment is read at call time
    so that keys exported after import are still picked up.
    """
    if explicit:
        return explicit
    return os.getenv("ANTHROPIC_API_KEY") or None


def validate_config(engine: str = "cloud") -> List[str]:
    """
    Check that the configuration needed by `engine` is present.

    Returns:
        List of problems (empty when the configuration is usable)
    """
    errors = []

    if engine not in ENGINES:
        errors.append(f"Unknown engine '{engine}' (expected one of: {', '.join(ENGINES)})")
        return errors

    if engine == "cloud" and not get_api_key():
        errors.append("ANTHROPIC_API_KEY environment variable is required for the cloud engine")

    if engine == "local" and not TESSERACT_PSM.isdigit():
        errors.append(f"TESSERACT_PSM must be an integer, got '{TESSERACT_PSM}'")

    return errors


def _mask(value: Optional[str]) -> str:
    if not value:
        return "Not configured"
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}...{value[-4:]}"


def get_config_summary() -> str:
    """
    Get a summary of the current configuration (for logging).
    Sensitive values are masked.
    """
    return f"""
Tire Intake Configuration:
  Cloud Extractor:
    - API Key: {_mask(get_api_key())}
    - Model: {MODEL_ID}
    - Max Tokens: {MAX_TOKENS}
    - Timeout: {CLOUD_TIMEOUT_SECONDS}s
    - Max Retries: {CLOUD_MAX_RETRIES}

  Local OCR:
    - Tesseract: {TESSERACT_CMD or "from PATH"}
    - Language: {TESSERACT_LANG}
    - Page Segmentation Mode: {TESSERACT_PSM}

  Output:
    - Output Directory: {OUTPUT_DIR}
    - Log Level: {LOG_LEVEL}
"""


if __name__ == "__main__":
    print(get_config_summary())
    for engine in ENGINES:
        problems = validate_config(engine)
        status = "OK" if not problems else "; ".join(problems)
        print(f"{engine}: {status}")
