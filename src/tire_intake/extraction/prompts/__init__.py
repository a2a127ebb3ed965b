"""System prompts for table extraction."""

from tire_intake.extraction.prompts.table import TABLE_EXTRACTION_PROMPT

__all__ = [
    "TABLE_EXTRACTION_PROMPT",
]
