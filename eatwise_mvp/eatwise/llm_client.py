import logging
import random
import time
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class LLMAPIError(RuntimeError):
    def __init__(self, status_code: int, err_type: str, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.err_type = err_type
        self.message = message
        self.raw = raw


def _safe_parse_api_error(resp: requests.Response) -> LLMAPIError:
    """
    Read an OpenAI-compatible error body as safely as possible.
    Anything unexpected still becomes an LLMAPIError.
    """
    status = resp.status_code
    raw = resp.text
    try:
        j = resp.json()
        # {"error": {"type": "...", "message": "..."}}
        if isinstance(j, dict) and isinstance(j.get("error"), dict):
            et = str(j["error"].get("type") or j["error"].get("code") or "api_error")
            msg = str(j["error"].get("message") or raw)
            return LLMAPIError(status, et, msg, raw=raw)
        # {"message": "..."}
        if isinstance(j, dict) and "message" in j:
            return LLMAPIError(status, "api_error", str(j.get("message")), raw=raw)
    except ValueError:
        pass
    return LLMAPIError(status, "api_error", raw, raw=raw)


def _unwrap_content(data: Any) -> str:
    """choices[0].message.content, kept as raw text (interpret.py does the parsing)."""
    if isinstance(data, dict) and isinstance(data.get("choices"), list) and data["choices"]:
        c0 = data["choices"][0] or {}
        msg = c0.get("message") or {}
        content = msg.get("content")
        if content is None:
            # legacy completions shape
            content = c0.get("text")
        if content is not None:
            return str(content)
    raise LLMAPIError(200, "bad_response", "response has no choices[0].message.content")


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, LLMAPIError):
        # quota will not come back by waiting
        return exc.status_code in RETRYABLE_STATUS and exc.err_type != "insufficient_quota"
    if isinstance(exc, requests.ReadTimeout):
        return False
    return isinstance(exc, requests.ConnectionError)


class LLMClient:
    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        timeout: float = 60,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = session or requests

    def _call_with_retry(self, fn, max_sleep: float = 30.0, base_sleep: float = 1.0):
        last_exc = None

        for i in range(self.max_retries):
            try:
                return fn()
            except (LLMAPIError, requests.RequestException) as e:
                last_exc = e
                if not _is_retryable(e) or i == self.max_retries - 1:
                    raise
                sleep = min(max_sleep, base_sleep * (2 ** i))
                sleep = sleep + random.uniform(0, 0.3 * sleep)
                logger.info("llm call failed (%s); retry %d/%d in %.1fs",
                            e, i + 1, self.max_retries - 1, sleep)
                time.sleep(sleep)

        if last_exc is not None:
            raise last_exc
        raise RuntimeError("llm call: exceeded retries")

    def text_call(self, user: str) -> str:
        def _do():
            r = self.session.post(
                f"{self.base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "user", "content": user},
                    ],
                },
                timeout=self.timeout,
            )

            try:
                r.raise_for_status()
            except requests.HTTPError:
                raise _safe_parse_api_error(r)

            try:
                data = r.json()
            except ValueError:
                raise LLMAPIError(r.status_code, "bad_response", "response is not JSON", raw=r.text)

            return _unwrap_content(data)

        return self._call_with_retry(_do)

    __call__ = text_call
