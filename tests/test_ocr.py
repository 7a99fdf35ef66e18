import pytesseract
import pytest

from eatwise import ocr
from eatwise.errors import ClientInputError, NoTextFoundError, OcrEngineError
from eatwise.ocr import TextExtractor

from conftest import FakeRecognizer


def test_extract_returns_trimmed_text(png_bytes):
    recognizer = FakeRecognizer("\n  Sugar, Salt, Red 40 \n\f")
    assert TextExtractor(recognize=recognizer).extract(png_bytes) == "Sugar, Salt, Red 40"
    assert recognizer.calls[0][1] == "eng"


def test_extract_uses_configured_language(png_bytes):
    recognizer = FakeRecognizer("Zucker")
    TextExtractor(lang="deu", recognize=recognizer).extract(png_bytes)
    assert recognizer.calls[0][1] == "deu"


@pytest.mark.parametrize("text", ["", "   ", "\n\t \f"])
def test_whitespace_only_text_raises_no_text_found(png_bytes, text):
    with pytest.raises(NoTextFoundError) as ei:
        TextExtractor(recognize=FakeRecognizer(text)).extract(png_bytes)
    assert isinstance(ei.value, ClientInputError)


def test_default_recognizer_goes_through_pytesseract(png_bytes, monkeypatch):
    seen = {}

    def fake_image_to_string(image, lang=None):
        seen["lang"] = lang
        return "Flour, water"

    monkeypatch.setattr(ocr.pytesseract, "image_to_string", fake_image_to_string)
    assert TextExtractor().extract(png_bytes) == "Flour, water"
    assert seen["lang"] == "eng"


def test_tesseract_failure_is_engine_error_not_no_text(png_bytes):
    recognizer = FakeRecognizer(pytesseract.TesseractError(1, "boom"))
    with pytest.raises(OcrEngineError):
        TextExtractor(recognize=recognizer).extract(png_bytes)


def test_unexpected_recognizer_error_is_engine_error(png_bytes):
    # pytesseract raises a bare RuntimeError when its timeout expires
    recognizer = FakeRecognizer(RuntimeError("Tesseract process timeout"))
    with pytest.raises(OcrEngineError):
        TextExtractor(recognize=recognizer).extract(png_bytes)


def test_decompression_bomb_is_engine_error(png_bytes, monkeypatch):
    def bomb(fp):
        raise ocr.Image.DecompressionBombError("too many pixels")

    monkeypatch.setattr(ocr.Image, "open", bomb)
    with pytest.raises(OcrEngineError):
        TextExtractor(recognize=FakeRecognizer("x")).extract(png_bytes)


def test_undecodable_bytes_are_engine_error():
    with pytest.raises(OcrEngineError):
        TextExtractor(recognize=FakeRecognizer("x")).extract(b"definitely not an image")


class SpyImage:
    def __init__(self):
        self.closed = False

    def load(self):
        pass

    def close(self):
        self.closed = True


@pytest.mark.parametrize("outcome", [
    "Sugar",
    "   ",
    pytesseract.TesseractError(1, "boom"),
    RuntimeError("unexpected"),
])
def test_session_is_released_on_every_exit_path(monkeypatch, outcome):
    spies = []

    def fake_open(fp):
        spies.append(SpyImage())
        return spies[-1]

    monkeypatch.setattr(ocr.Image, "open", fake_open)
    extractor = TextExtractor(recognize=FakeRecognizer(outcome))

    try:
        extractor.extract(b"bytes")
    except (NoTextFoundError, OcrEngineError, RuntimeError):
        pass

    assert len(spies) == 1
    assert spies[0].closed


def test_each_call_gets_its_own_session(monkeypatch):
    spies = []

    def fake_open(fp):
        spies.append(SpyImage())
        return spies[-1]

    monkeypatch.setattr(ocr.Image, "open", fake_open)
    recognizer = FakeRecognizer("Sugar")
    extractor = TextExtractor(recognize=recognizer)
    extractor.extract(b"a")
    extractor.extract(b"b")

    assert len(spies) == 2
    assert recognizer.calls[0][0] is not recognizer.calls[1][0]
    assert all(s.closed for s in spies)
