"""
Error taxonomy for the research pipeline and its HTTP surface.
"""
from __future__ import annotations

from typing import Mapping, Optional


class PipelineError(RuntimeError):
    """Base class for failures that end a pipeline run."""

    code = "pipeline_error"

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[str] = None,
        details: Optional[Mapping[str, object]] = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.details = dict(details or {})


class ValidationError(PipelineError):
    """Bad caller input, e.g. a missing topic."""

    code = "validation_error"


class GenerationError(PipelineError):
    """The generation client failed or returned nothing usable."""

    code = "generation_error"


class PersistenceError(PipelineError):
    """The storage collaborator rejected a write."""

    code = "persistence_error"


class AuthError(PipelineError):
    """Shared-secret mismatch on the scheduled trigger."""

    code = "auth_error"


class PipelineCancelled(PipelineError):
    """The consumer of a streaming run went away."""

    code = "cancelled"
