import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    llm_api_key: str
    llm_base_url: str
    llm_model: str
    llm_timeout_seconds: int
    llm_max_retries: int
    ocr_lang: str
    max_upload_bytes: int
    port: int

    @staticmethod
    def from_env() -> "Settings":
        api_key = (
            os.environ.get("GROQ_API_KEY", "").strip()
            or os.environ.get("OPENAI_API_KEY", "").strip()
        )
        base_url = os.environ.get("LLM_BASE_URL", "https://api.groq.com/openai/v1").strip()
        model = os.environ.get("LLM_MODEL", "llama-3.1-8b-instant").strip()
        timeout_seconds = int(os.environ.get("LLM_TIMEOUT_SECONDS", "60"))
        max_retries = int(os.environ.get("LLM_MAX_RETRIES", "3"))
        ocr_lang = os.environ.get("OCR_LANG", "eng").strip() or "eng"
        max_upload_bytes = int(os.environ.get("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
        port = int(os.environ.get("PORT", "5000"))

        if not api_key:
            raise RuntimeError("Missing GROQ_API_KEY (or OPENAI_API_KEY)")
        if max_retries < 1:
            raise RuntimeError("LLM_MAX_RETRIES must be >= 1")

        return Settings(
            llm_api_key=api_key,
            llm_base_url=base_url,
            llm_model=model,
            llm_timeout_seconds=timeout_seconds,
            llm_max_retries=max_retries,
            ocr_lang=ocr_lang,
            max_upload_bytes=max_upload_bytes,
            port=port,
        )
