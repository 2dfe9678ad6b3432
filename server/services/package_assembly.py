from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol

from ai_agents.services.models import ResearchPackage, SectionResult
from server.errors import PersistenceError

logger = logging.getLogger(__name__)


class IdeaStore(Protocol):
    def save_idea(
        self,
        idea_id: str,
        topic: str,
        style: Optional[str],
        package: ResearchPackage,
        automated: bool = False,
    ) -> None:
        ...


def assemble_package(section_results: Iterable[SectionResult]) -> ResearchPackage:
    """Build the package from per-stage results; sections not supplied stay empty."""
    values = {result.key.value: dict(result.payload) for result in section_results}
    return ResearchPackage.from_dict(values)


class IdeaPersistenceGate:
    """Hands a finished package to the storage collaborator exactly once."""

    def __init__(self, repository: IdeaStore) -> None:
        self._repository = repository

    def persist(
        self,
        idea_id: str,
        topic: str,
        style: Optional[str],
        package: ResearchPackage,
        automated: bool = False,
    ) -> None:
        try:
            self._repository.save_idea(idea_id, topic, style, package, automated=automated)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Failed to save idea {idea_id}: {exc}") from exc
        logger.info("Persisted idea %s (automated=%s)", idea_id, automated)
