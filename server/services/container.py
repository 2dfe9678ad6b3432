from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from ai_agents.llm.gemini_client import GeminiText
from server.config.settings import BaseConfig
from server.data_access.idea_repository import IdeaRepository
from server.services.daily_idea_service import DailyIdeaService, EmailSender
from server.services.email_notifier import ResendNotifier
from server.services.package_assembly import IdeaPersistenceGate
from server.services.research_pipeline import ResearchPipeline, SectionGenerator, StreamWorkers


@dataclass
class ResearchServices:
    """Collaborators built once at startup from the app settings.

    ``client_factory`` is called per run so that every run owns its own
    generation client. ``workers`` is shared so that shutdown can wait for
    streaming runs still in flight.
    """

    settings: BaseConfig
    repository: IdeaRepository
    client_factory: Callable[[], SectionGenerator]
    notifier: Optional[EmailSender] = None
    workers: StreamWorkers = field(default_factory=StreamWorkers)

    def build_pipeline(self) -> ResearchPipeline:
        return ResearchPipeline(
            client=self.client_factory(),
            gate=IdeaPersistenceGate(self.repository),
            workers=self.workers,
        )

    def build_daily_service(self) -> DailyIdeaService:
        return DailyIdeaService(
            pipeline=self.build_pipeline(),
            notifier=self.notifier,
            from_address=self.settings.EMAIL_FROM,
            recipients=self.settings.email_recipients(),
        )


def build_services(settings: BaseConfig) -> ResearchServices:
    def client_factory() -> SectionGenerator:
        return GeminiText(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            timeout=settings.GEMINI_TIMEOUT,
            max_output_tokens=settings.GEMINI_MAX_OUTPUT_TOKENS,
        )

    notifier = ResendNotifier(api_key=settings.RESEND_API_KEY) if settings.RESEND_API_KEY else None
    return ResearchServices(
        settings=settings,
        repository=IdeaRepository(settings.DATABASE_PATH),
        client_factory=client_factory,
        notifier=notifier,
    )
