from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Sequence

from ai_agents.services.models import PersistedIdea
from server.services.email_notifier import EmailDeliveryError, build_email_html, build_subject
from server.services.research_pipeline import ResearchPipeline

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    def send(self, *, from_address: str, to: Sequence[str], subject: str, html_body: str) -> Optional[str]:
        ...


@dataclass
class DailyIdeaResult:
    id: str
    topic: str
    top_title: str
    email_sent: bool

    def to_dict(self) -> Dict[str, object]:
        return {
            "success": True,
            "id": self.id,
            "topic": self.topic,
            "topTitle": self.top_title,
            "emailSent": self.email_sent,
        }


class DailyIdeaService:
    """
    Scheduled variant of the pipeline: discover a topic, run every stage without
    streaming, persist, then optionally email the digest.
    """

    def __init__(
        self,
        *,
        pipeline: ResearchPipeline,
        notifier: Optional[EmailSender] = None,
        from_address: str = "",
        recipients: Sequence[str] = (),
    ) -> None:
        self._pipeline = pipeline
        self._notifier = notifier
        self._from_address = from_address
        self._recipients = list(recipients)

    def run(self) -> DailyIdeaResult:
        idea = self._pipeline.run_daily()
        top_title = idea.package.top_title(idea.topic)
        email_sent = self._notify(idea, top_title)
        return DailyIdeaResult(id=idea.id, topic=idea.topic, top_title=top_title, email_sent=email_sent)

    def _notify(self, idea: PersistedIdea, top_title: str) -> bool:
        if self._notifier is None:
            logger.info("Email notifier not configured; skipping digest for %s", idea.id)
            return False
        if not self._recipients:
            logger.warning("No digest recipients configured; skipping email for %s", idea.id)
            return False
        try:
            self._notifier.send(
                from_address=self._from_address,
                to=self._recipients,
                subject=build_subject(top_title),
                html_body=build_email_html(idea.topic, idea.package),
            )
        except EmailDeliveryError as exc:
            logger.warning("Daily digest email for %s failed: %s", idea.id, exc)
            return False
        return True
