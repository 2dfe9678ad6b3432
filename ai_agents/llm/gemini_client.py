# ai_agents/llm/gemini_client.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import requests
from requests import Response

logger = logging.getLogger(__name__)


# --------------------------
# REST endpoint (v1beta)
# --------------------------
_GEN_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

_DEFAULT_TEXT_MODEL = "gemini-2.0-flash"


class GeminiError(RuntimeError):
    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Optional[Dict] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


def _default_session_factory() -> requests.Session:
    session = requests.Session()
    adapter = requests.adapters.HTTPAdapter(max_retries=0)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def _post(
    url: str,
    api_key: str,
    payload: Dict,
    *,
    timeout: int = 120,
    session_factory: Callable[[], requests.Session] = _default_session_factory,
) -> Dict:
    """POST once to the Generative Language REST API; non-2xx raises GeminiError."""

    session = session_factory()
    headers = {
        "Content-Type": "application/json; charset=utf-8",
        "x-goog-api-key": api_key,
    }

    try:
        resp: Response = session.post(url, headers=headers, data=json.dumps(payload), timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("Gemini HTTP error: %s", exc)
        raise GeminiError("Gemini HTTP request failed", payload={"error": str(exc)}) from exc

    if resp.status_code // 100 == 2:
        try:
            return resp.json()
        except ValueError as exc:
            raise GeminiError("Gemini returned a non-JSON body", status_code=resp.status_code) from exc

    try:
        data = resp.json()
    except ValueError:
        data = {"error": {"code": resp.status_code, "message": resp.text}}

    message = (data.get("error") or {}).get("message") if isinstance(data, dict) else None
    raise GeminiError(
        f"Gemini REST error ({resp.status_code}): {message or json.dumps(data, ensure_ascii=False)}",
        status_code=resp.status_code,
        payload=data,
    )


# --------------------------
# Text generation client
# --------------------------
@dataclass
class GeminiText:
    """
    Text-generation client for the Gemini REST API.

    ``generate_section`` is the pipeline's generation-client contract: a system
    prompt, the shared user context and a sampling temperature in, text out.
    """

    api_key: str
    model: str = _DEFAULT_TEXT_MODEL
    timeout: int = 120  # seconds
    max_output_tokens: int = 8192
    session_factory: Callable[[], requests.Session] = _default_session_factory

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY is not set")

    def generate_section(self, system_prompt: str, user_prompt: str, temperature: float) -> str:
        url = _GEN_URL.format(model=self.model)
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": self.max_output_tokens,
                "candidateCount": 1,
            },
        }
        data = _post(
            url,
            self.api_key,
            payload,
            timeout=self.timeout,
            session_factory=self.session_factory,
        )

        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback") or {}
            raise GeminiError(
                f"Gemini returned no candidates (blockReason={feedback.get('blockReason')})",
                payload=data,
            )
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)
