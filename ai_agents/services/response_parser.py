"""Lenient conversion of generated text into section payloads."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

from ai_agents.services.models import FALLBACK_KEY

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json\n?")
_FENCE = re.compile(r"```\n?")


def strip_fences(text: str) -> str:
    cleaned = _JSON_FENCE.sub("", text)
    return _FENCE.sub("", cleaned).strip()


def parse_section(raw_text: Any) -> Dict[str, Any]:
    """Decode a generated section, degrading to ``{"raw": raw_text}``.

    Code-fence markers are removed before strict JSON decoding. Anything that
    does not decode to a JSON object comes back as the fallback payload; this
    function never raises.
    """
    if not isinstance(raw_text, str):
        raw = "" if raw_text is None else str(raw_text)
        return {FALLBACK_KEY: raw}
    try:
        parsed = json.loads(strip_fences(raw_text))
    except (ValueError, RecursionError) as exc:
        logger.warning("Generated section is not valid JSON, keeping raw text (%s)", exc)
        return {FALLBACK_KEY: raw_text}
    if not isinstance(parsed, dict):
        logger.warning("Generated section decoded to %s, keeping raw text", type(parsed).__name__)
        return {FALLBACK_KEY: raw_text}
    return parsed
