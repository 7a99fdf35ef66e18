class EatWiseError(RuntimeError):
    """Base for errors raised by the analysis core."""


class ClientInputError(EatWiseError):
    """The uploaded label itself cannot be analyzed. Maps to HTTP 400."""


class NoTextFoundError(ClientInputError):
    def __init__(self, message: str = "No text found in image"):
        super().__init__(message)


class InputTooShortError(ClientInputError):
    def __init__(self, length: int, minimum: int):
        super().__init__("Text too short to analyze")
        self.length = length
        self.minimum = minimum


class OcrEngineError(EatWiseError):
    """The OCR engine failed (undecodable image, tesseract crash, missing binary)."""
