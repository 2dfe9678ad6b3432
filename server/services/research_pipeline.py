from __future__ import annotations

import logging
import threading
import uuid
from typing import Callable, List, Optional, Protocol, Sequence, Set

from ai_agents.services.models import (
    GenerationRequest,
    PersistedIdea,
    ProgressEvent,
    SectionResult,
)
from ai_agents.services.progress import BufferedEmitter, EventStream, ProgressEmitter, StreamingEmitter
from ai_agents.services.response_parser import parse_section
from ai_agents.services.stages import STAGES, TOPIC_DISCOVERY, Stage, TopicDiscoveryStage
from server.errors import GenerationError, PipelineCancelled, PipelineError, ValidationError
from server.services.package_assembly import IdeaPersistenceGate, assemble_package

logger = logging.getLogger(__name__)


class SectionGenerator(Protocol):
    def generate_section(self, system_prompt: str, user_prompt: str, temperature: float) -> str:
        ...


class StreamWorkers:
    """Background threads for streaming runs, kept so shutdown can wait on them."""

    def __init__(self) -> None:
        self._threads: Set[threading.Thread] = set()
        self._lock = threading.Lock()

    def start(self, target: Callable[[], None], name: str) -> threading.Thread:
        def _tracked() -> None:
            logger.info("Streaming run %s started", name)
            try:
                target()
            finally:
                with self._lock:
                    self._threads.discard(threading.current_thread())
                logger.info("Streaming run %s finished", name)

        thread = threading.Thread(target=_tracked, name=name, daemon=True)
        with self._lock:
            self._threads.add(thread)
        thread.start()
        return thread

    def active(self) -> List[threading.Thread]:
        with self._lock:
            return list(self._threads)

    def join(self, timeout: Optional[float] = None) -> int:
        """Wait for running streams; returns how many are still alive."""
        pending = self.active()
        if pending:
            logger.info("Waiting for %d streaming run(s) to finish", len(pending))
        for thread in pending:
            thread.join(timeout)
        alive = [thread.name for thread in pending if thread.is_alive()]
        if alive:
            logger.warning("Streaming runs still in progress at shutdown: %s", ", ".join(alive))
        return len(alive)


class ResearchPipeline:
    """
    Runs the fixed stage table against a generation client and persists the result.

    Stages execute strictly in ``STAGES`` order, one client call each, with no
    retries. The first failing stage ends the run: one ``error`` event is emitted,
    the error is re-raised, and nothing is persisted.
    """

    def __init__(
        self,
        *,
        client: SectionGenerator,
        gate: IdeaPersistenceGate,
        stages: Sequence[Stage] = STAGES,
        topic_stage: TopicDiscoveryStage = TOPIC_DISCOVERY,
        workers: Optional[StreamWorkers] = None,
    ) -> None:
        self._client = client
        self._gate = gate
        self._stages = tuple(stages)
        self._topic_stage = topic_stage
        self._workers = workers or StreamWorkers()

    # ------------------------------------------------------------------ #
    # Entry points
    # ------------------------------------------------------------------ #
    def run(
        self,
        request: GenerationRequest,
        emitter: Optional[ProgressEmitter] = None,
        *,
        automated: bool = False,
    ) -> PersistedIdea:
        emitter = emitter or BufferedEmitter()
        try:
            return self._execute(request, emitter, automated=automated)
        except PipelineCancelled:
            logger.info("Research run for %r abandoned: consumer disconnected", request.topic)
            raise
        except PipelineError as exc:
            logger.warning("Research run for %r failed: %s", request.topic, exc)
            self._emit(emitter, ProgressEvent.failed(str(exc)))
            raise
        except Exception as exc:
            logger.exception("Unexpected failure in research run for %r", request.topic)
            self._emit(emitter, ProgressEvent.failed(str(exc) or "An unexpected error occurred"))
            raise

    def discover_topic(self) -> str:
        """Ask the model for today's topic (the scheduled run's pre-stage)."""
        stage = self._topic_stage
        try:
            raw = self._client.generate_section(stage.prompt, stage.user_prompt, stage.temperature)
        except Exception as exc:
            raise GenerationError(f"Topic discovery failed: {exc}", stage="topicDiscovery") from exc
        topic = _clean_topic(raw)
        if not topic:
            raise GenerationError("Topic discovery returned an empty topic", stage="topicDiscovery")
        logger.info("Discovered topic %r", topic)
        return topic

    def run_daily(self, emitter: Optional[ProgressEmitter] = None) -> PersistedIdea:
        topic = self.discover_topic()
        return self.run(GenerationRequest(topic=topic), emitter or BufferedEmitter(), automated=True)

    def stream(self, request: GenerationRequest) -> EventStream:
        """Start the run on a worker thread and return its event-stream body."""
        emitter = StreamingEmitter()

        def _worker() -> None:
            try:
                self.run(request, emitter)
            except PipelineError:
                pass  # already reported on the stream by run()
            except Exception:
                logger.debug("Streaming run ended with an unexpected error", exc_info=True)
            finally:
                emitter.close()

        self._workers.start(_worker, name=f"research-{uuid.uuid4().hex[:8]}")
        return emitter.iter_events()

    # ------------------------------------------------------------------ #
    # Stage loop
    # ------------------------------------------------------------------ #
    def _execute(self, request: GenerationRequest, emitter: ProgressEmitter, *, automated: bool) -> PersistedIdea:
        topic = request.topic.strip() if isinstance(request.topic, str) else ""
        if not topic:
            raise ValidationError("Topic is required")
        request = GenerationRequest(topic=topic, style=(request.style or "").strip() or None)
        context = request.user_context()

        results: List[SectionResult] = []
        for index, stage in enumerate(self._stages, start=1):
            if emitter.cancelled:
                raise PipelineCancelled("Consumer disconnected", stage=stage.key.value)
            self._emit(emitter, ProgressEvent.generating(stage.key, stage.label))
            logger.debug("Stage %s/%s %s started", index, len(self._stages), stage.key.value)

            try:
                raw = self._client.generate_section(stage.prompt, context, stage.temperature)
            except Exception as exc:
                raise GenerationError(
                    f"Failed to generate {stage.key.value}: {exc}", stage=stage.key.value
                ) from exc
            if not isinstance(raw, str) or not raw.strip():
                raise GenerationError(f"Empty response for {stage.key.value}", stage=stage.key.value)

            result = SectionResult(key=stage.key, payload=parse_section(raw))
            if result.is_fallback:
                logger.warning("Stage %s produced unstructured output", stage.key.value)
            self._emit(emitter, ProgressEvent.complete(stage.key, result.payload))
            results.append(result)

        if emitter.cancelled:
            raise PipelineCancelled("Consumer disconnected before persistence")

        package = assemble_package(results)
        idea_id = str(uuid.uuid4())
        self._gate.persist(idea_id, request.topic, request.style, package, automated=automated)

        self._emit(emitter, ProgressEvent.done(idea_id, package))
        return PersistedIdea(
            id=idea_id,
            topic=request.topic,
            style=request.style,
            package=package,
            automated=automated,
        )

    @staticmethod
    def _emit(emitter: ProgressEmitter, event: ProgressEvent) -> None:
        try:
            emitter.emit(event)
        except Exception as exc:
            logger.warning("Progress emitter rejected %s event: %s", event.status.value, exc)


def _clean_topic(raw: Optional[str]) -> str:
    topic = (raw or "").strip()
    if len(topic) >= 1 and topic[0] in "\"'":
        topic = topic[1:]
    if len(topic) >= 1 and topic[-1] in "\"'":
        topic = topic[:-1]
    return topic.strip()
