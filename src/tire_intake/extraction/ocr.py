"""
Local OCR Table Parser - offline extraction with Tesseract.

The engine is opened per call with `tesseract_engine()` and always released,
including when recognition fails. Recognized text is handed to the table
reconstruction pipeline in `table_parser`.
"""

import io
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

import pytesseract
from PIL import Image, UnidentifiedImageError

from tire_intake.core import config
from tire_intake.core.errors import EngineFailureError
from tire_intake.core.schema import ExtractedRow
from tire_intake.extraction.image_source import resolve
from tire_intake.extraction.table_parser import parse_table_text

logger = logging.getLogger(__name__)


class TesseractEngine:
    """
    One OCR session.

    Holds the images opened for recognition so they can be closed together
    when the session ends.
    """

    def __init__(self, lang: Optional[str] = None, psm: Optional[str] = None, cmd: Optional[str] = None):
        self.lang = lang or config.TESSERACT_LANG
        self.psm = str(psm or config.TESSERACT_PSM)
        self.cmd = cmd or config.TESSERACT_CMD
        self._images: List[Image.Image] = []
        self._previous_cmd: Optional[str] = None
        self.closed = False

    @property
    def tesseract_config(self) -> str:
        return f"--psm {self.psm}"

    def start(self) -> "TesseractEngine":
        """
        Check that the tesseract binary is reachable.

        Raises:
            EngineFailureError: If tesseract cannot be found or started
        """
        if self.cmd:
            # pytesseract keeps the binary path module-wide; terminate() puts it back
            self._previous_cmd = pytesseract.pytesseract.tesseract_cmd
            pytesseract.pytesseract.tesseract_cmd = self.cmd
        try:
            version = pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, OSError) as e:
            raise EngineFailureError(f"Tesseract is not available: {e}") from e
        logger.debug(f"Tesseract {version} ready (lang={self.lang}, psm={self.psm})")
        return self

    def recognize(self, image_bytes: bytes) -> str:
        """
        Run OCR over an encoded image.

        Raises:
            EngineFailureError: If the image cannot be decoded or recognition fails
        """
        if self.closed:
            raise EngineFailureError("Tesseract engine already terminated")
        try:
            image = Image.open(io.BytesIO(image_bytes))
        except (UnidentifiedImageError, OSError) as e:
            raise EngineFailureError(f"Cannot decode image for OCR: {e}") from e
        self._images.append(image)

        try:
            return pytesseract.image_to_string(image, lang=self.lang, config=self.tesseract_config)
        except (pytesseract.TesseractError, RuntimeError, OSError) as e:
            raise EngineFailureError(f"Tesseract recognition failed: {e}") from e

    def terminate(self) -> None:
        """Release every image held by this session. Safe to call twice."""
        for image in self._images:
            try:
                image.close()
            except OSError as e:
                logger.warning(f"Failed to close OCR image: {e}")
        self._images = []
        if self._previous_cmd is not None:
            pytesseract.pytesseract.tesseract_cmd = self._previous_cmd
            self._previous_cmd = None
        self.closed = True


@contextmanager
def tesseract_engine(
    lang: Optional[str] = None,
    psm: Optional[str] = None,
    cmd: Optional[str] = None,
) -> Iterator[TesseractEngine]:
    """Open an OCR session that is terminated on every exit path."""
    engine = TesseractEngine(lang=lang, psm=psm, cmd=cmd)
    try:
        yield engine.start()
    finally:
        engine.terminate()


def recognize_text(image_input, lang: Optional[str] = None, psm: Optional[str] = None) -> str:
    """Raw OCR text for an image (bytes or base64 string)."""
    image = resolve(image_input)
    with tesseract_engine(lang=lang, psm=psm) as engine:
        return engine.recognize(image.data)


def extract_table_from_image_tesseract(
    image_input,
    lang: Optional[str] = None,
    psm: Optional[str] = None,
) -> List[ExtractedRow]:
    """
    Extract table rows from a price-list photo without any network access.

    Args:
        image_input: Raw image bytes (a base64 / data-URL string is also accepted)
        lang: Tesseract language pack (default: config.TESSERACT_LANG)
        psm: Page segmentation mode (default: config.TESSERACT_PSM)

    Returns:
        Rows that passed price, size and brand recovery; empty when none did

    Raises:
        InvalidInputError: image_input is not bytes or a base64 string
        EngineFailureError: Tesseract could not start or could not read the image
    """
    text = recognize_text(image_input, lang=lang, psm=psm)
    rows = parse_table_text(text)
    logger.info(f"Extracted {len(rows)} rows from {len(text.splitlines())} OCR lines")
    return rows
