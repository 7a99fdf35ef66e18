"""Label text extraction on top of Tesseract.

Every call opens its own session (decoded image + tesseract run) and closes it on the
way out. Sessions are never shared between calls.
"""
import io
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

import pytesseract
from PIL import Image, UnidentifiedImageError

from .errors import NoTextFoundError, OcrEngineError

logger = logging.getLogger(__name__)

DEFAULT_LANG = "eng"

Recognizer = Callable[[Image.Image, str], str]


def _tesseract_recognize(image: Image.Image, lang: str) -> str:
    return pytesseract.image_to_string(image, lang=lang)


def _decode_failed(e: Exception) -> OcrEngineError:
    return OcrEngineError(f"cannot decode image: {e}")


@contextmanager
def ocr_session(image_bytes: bytes) -> Iterator[Image.Image]:
    try:
        image = Image.open(io.BytesIO(image_bytes))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise _decode_failed(e) from e
    try:
        try:
            image.load()
        except OSError as e:
            raise _decode_failed(e) from e
        yield image
    finally:
        image.close()


class TextExtractor:
    def __init__(self, lang: str = DEFAULT_LANG, recognize: Optional[Recognizer] = None):
        self.lang = lang
        self._recognize = recognize or _tesseract_recognize

    def extract(self, image_bytes: bytes) -> str:
        with ocr_session(image_bytes) as image:
            try:
                text = self._recognize(image, self.lang)
            except Exception as e:
                # TesseractError, TesseractNotFoundError, RuntimeError on timeout, ...
                raise OcrEngineError(f"tesseract failed: {e}") from e

        text = (text or "").strip()
        if not text:
            raise NoTextFoundError()
        logger.debug("ocr extracted %d chars (lang=%s)", len(text), self.lang)
        return text
