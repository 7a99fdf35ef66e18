import logging
import os
from typing import Callable, Optional

from .config import Settings
from .interpret import interpret
from .llm_client import LLMClient
from .ocr import TextExtractor
from .prompts import build_prompt
from .report import AnalysisReport, fallback_report

logger = logging.getLogger(__name__)

# Observation flag: [obs] lines are printed only when OBS=1
OBS = os.getenv("OBS", "") == "1"

Generate = Callable[[str], str]


def _obs(msg: str) -> None:
    if OBS:
        print(msg)


class AnalysisPipeline:
    """image bytes -> OCR text -> prompt -> generate() -> AnalysisReport.

    ClientInputError (no text / too short) propagates. Failures of the model call and of
    interpretation both end in the fallback report. Holds no per-request state.
    """

    def __init__(self, generate: Generate, extractor: Optional[TextExtractor] = None):
        self.generate = generate
        self.extractor = extractor or TextExtractor()

    @classmethod
    def from_settings(cls, s: Settings) -> "AnalysisPipeline":
        llm = LLMClient(
            s.llm_api_key,
            s.llm_base_url,
            s.llm_model,
            timeout=s.llm_timeout_seconds,
            max_retries=s.llm_max_retries,
        )
        return cls(llm.text_call, TextExtractor(lang=s.ocr_lang))

    def extract(self, image_bytes: bytes) -> str:
        return self.extractor.extract(image_bytes)

    def analyze(self, image_bytes: bytes) -> AnalysisReport:
        text = self.extract(image_bytes)
        _obs(f"[obs] ocr text: {text!r}")
        return self.analyze_text(text)

    def analyze_text(self, text: str) -> AnalysisReport:
        prompt = build_prompt(text)

        try:
            _obs("[obs] before generate")
            raw = self.generate(prompt)
            _obs("[obs] after generate")
        except Exception as e:
            logger.error("generate failed (%s: %s); using fallback", type(e).__name__, e)
            return fallback_report()

        _obs(f"[obs] raw model output: {raw!r}")
        return interpret(raw)
