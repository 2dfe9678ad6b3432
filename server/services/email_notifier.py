"""Daily digest email via the Resend HTTP API."""
from __future__ import annotations

import html
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence

import requests

from ai_agents.services.models import ResearchPackage, SectionKey, is_fallback

logger = logging.getLogger(__name__)

_RESEND_URL = "https://api.resend.com/emails"

_SECTION_TITLES = {
    SectionKey.VIRAL_CONCEPT: "Viral Concept",
    SectionKey.BACKGROUND_RESEARCH: "Background Research",
    SectionKey.INTERVIEW_TARGETS: "Interview Targets",
    SectionKey.DOCUMENTS_AND_DATA: "Documents & Data",
    SectionKey.FOIA_SUGGESTIONS: "FOIA Suggestions",
    SectionKey.STORY_STRUCTURE: "Story Structure",
    SectionKey.VISUAL_SUGGESTIONS: "Visual Suggestions",
}


class EmailDeliveryError(RuntimeError):
    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class ResendNotifier:
    api_key: str
    timeout: int = 30
    session_factory: Callable[[], requests.Session] = requests.Session

    def send(self, *, from_address: str, to: Sequence[str], subject: str, html_body: str) -> Optional[str]:
        payload = {"from": from_address, "to": list(to), "subject": subject, "html": html_body}
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        session = self.session_factory()
        logger.debug("Sending %r to %s recipient(s)", subject, len(payload["to"]))
        try:
            resp = session.post(_RESEND_URL, headers=headers, data=json.dumps(payload), timeout=self.timeout)
        except requests.RequestException as exc:
            raise EmailDeliveryError(f"Resend request failed: {exc}") from exc
        if resp.status_code // 100 != 2:
            raise EmailDeliveryError(
                f"Resend rejected the email ({resp.status_code}): {resp.text}",
                status_code=resp.status_code,
            )
        try:
            return (resp.json() or {}).get("id")
        except ValueError:
            return None


# --------------------------
# HTML rendering
# --------------------------
def _label(key: str) -> str:
    spaced = "".join(f" {ch}" if ch.isupper() else ch for ch in key).strip()
    return spaced[:1].upper() + spaced[1:]


def _render_value(value: Any) -> str:
    if isinstance(value, Mapping):
        items = "".join(
            f"<li><strong>{html.escape(_label(str(k)))}:</strong> {_render_value(v)}</li>"
            for k, v in value.items()
            if v not in (None, "", [], {})
        )
        return f"<ul>{items}</ul>" if items else ""
    if isinstance(value, list):
        items = "".join(f"<li>{_render_value(v)}</li>" for v in value if v not in (None, ""))
        return f"<ul>{items}</ul>" if items else ""
    if value is None:
        return ""
    return html.escape(str(value))


def _render_section(key: SectionKey, payload: Mapping[str, Any]) -> str:
    title = html.escape(_SECTION_TITLES[key])
    if not payload:
        body = "<p><em>Not generated.</em></p>"
    elif is_fallback(payload):
        body = f"<pre style=\"white-space:pre-wrap\">{html.escape(str(payload.get('raw', '')))}</pre>"
    else:
        body = _render_value(payload)
    return f"<h2>{title}</h2>{body}"


def build_email_html(topic: str, package: ResearchPackage) -> str:
    top_title = package.top_title(topic)
    titles: List[str] = []
    raw_titles = package.viral_concept.get("titles")
    if isinstance(raw_titles, list):
        titles = [str(t) for t in raw_titles[1:] if str(t).strip()]
    hook = package.viral_concept.get("hook")

    parts: List[str] = [
        "<div style=\"font-family:Helvetica,Arial,sans-serif;max-width:680px;margin:0 auto\">",
        "<p style=\"color:#888;text-transform:uppercase;letter-spacing:2px\">DeepCut Daily</p>",
        f"<h1>{html.escape(top_title)}</h1>",
        f"<p><strong>Topic:</strong> {html.escape(topic)}</p>",
    ]
    if isinstance(hook, str) and hook.strip():
        parts.append(f"<blockquote>{html.escape(hook)}</blockquote>")
    if titles:
        parts.append("<p><strong>Alternative titles:</strong></p>" + _render_value(titles))
    parts.extend(_render_section(result.key, result.payload) for result in package.sections())
    parts.append("</div>")
    return "".join(parts)


def build_subject(top_title: str) -> str:
    return f"\U0001F3AC DeepCut Daily: {top_title}"

