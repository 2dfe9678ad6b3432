"""
Shared data models for the research pipeline.

Section payloads come straight from the generation model and have no enforced
schema. The ``*Shape`` TypedDicts below describe what the prompts ask for;
any section may instead hold the ``{"raw": text}`` fallback, so readers should
go through ``.get`` and tolerate absence.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, TypedDict


class SectionKey(str, Enum):
    VIRAL_CONCEPT = "viralConcept"
    BACKGROUND_RESEARCH = "backgroundResearch"
    INTERVIEW_TARGETS = "interviewTargets"
    DOCUMENTS_AND_DATA = "documentsAndData"
    FOIA_SUGGESTIONS = "foiaSuggestions"
    STORY_STRUCTURE = "storyStructure"
    VISUAL_SUGGESTIONS = "visualSuggestions"


class EventStatus(str, Enum):
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"
    DONE = "done"


FALLBACK_KEY = "raw"


# --------------------------
# Expected section shapes
# --------------------------
class ViralConceptShape(TypedDict, total=False):
    titles: List[str]
    hook: str
    angle: str
    logline: str
    targetAudience: str
    whyNow: str


class BackgroundResearchShape(TypedDict, total=False):
    summary: str
    timeline: List[Dict[str, str]]
    keyFacts: List[str]
    controversies: List[str]
    sources: List[Dict[str, str]]


class InterviewTargetsShape(TypedDict, total=False):
    targets: List[Dict[str, str]]


class DocumentsAndDataShape(TypedDict, total=False):
    documents: List[Dict[str, str]]
    datasets: List[Dict[str, str]]
    archives: List[Dict[str, str]]


class FoiaSuggestionsShape(TypedDict, total=False):
    requests: List[Dict[str, str]]
    tips: List[str]


class StoryStructureShape(TypedDict, total=False):
    format: str
    runtime: str
    coldOpen: str
    acts: List[Dict[str, Any]]
    ending: str


class VisualSuggestionsShape(TypedDict, total=False):
    archivalFootage: List[str]
    reenactments: List[str]
    graphics: List[str]
    bRoll: List[str]
    musicMood: str


class FallbackShape(TypedDict):
    raw: str


SECTION_SHAPES = {
    SectionKey.VIRAL_CONCEPT: ViralConceptShape,
    SectionKey.BACKGROUND_RESEARCH: BackgroundResearchShape,
    SectionKey.INTERVIEW_TARGETS: InterviewTargetsShape,
    SectionKey.DOCUMENTS_AND_DATA: DocumentsAndDataShape,
    SectionKey.FOIA_SUGGESTIONS: FoiaSuggestionsShape,
    SectionKey.STORY_STRUCTURE: StoryStructureShape,
    SectionKey.VISUAL_SUGGESTIONS: VisualSuggestionsShape,
}


def is_fallback(payload: Mapping[str, Any]) -> bool:
    """True when ``payload`` is the unstructured ``{"raw": text}`` sentinel."""
    return isinstance(payload, Mapping) and set(payload.keys()) == {FALLBACK_KEY}


# --------------------------
# Requests and results
# --------------------------
@dataclass(frozen=True)
class GenerationRequest:
    topic: str
    style: Optional[str] = None

    def user_context(self) -> str:
        style_context = f" The documentary style/tone should be: {self.style}." if self.style else ""
        return f'Documentary topic: "{self.topic}"{style_context}'


@dataclass(frozen=True)
class SectionResult:
    key: SectionKey
    payload: Dict[str, Any]

    @property
    def is_fallback(self) -> bool:
        return is_fallback(self.payload)


@dataclass
class ResearchPackage:
    viral_concept: Dict[str, Any] = field(default_factory=dict)
    background_research: Dict[str, Any] = field(default_factory=dict)
    interview_targets: Dict[str, Any] = field(default_factory=dict)
    documents_and_data: Dict[str, Any] = field(default_factory=dict)
    foia_suggestions: Dict[str, Any] = field(default_factory=dict)
    story_structure: Dict[str, Any] = field(default_factory=dict)
    visual_suggestions: Dict[str, Any] = field(default_factory=dict)

    _ATTRS = {
        SectionKey.VIRAL_CONCEPT: "viral_concept",
        SectionKey.BACKGROUND_RESEARCH: "background_research",
        SectionKey.INTERVIEW_TARGETS: "interview_targets",
        SectionKey.DOCUMENTS_AND_DATA: "documents_and_data",
        SectionKey.FOIA_SUGGESTIONS: "foia_suggestions",
        SectionKey.STORY_STRUCTURE: "story_structure",
        SectionKey.VISUAL_SUGGESTIONS: "visual_suggestions",
    }

    def section(self, key: SectionKey) -> Dict[str, Any]:
        return getattr(self, self._ATTRS[SectionKey(key)])

    def sections(self) -> Iterator[SectionResult]:
        for key in SectionKey:
            yield SectionResult(key=key, payload=self.section(key))

    def top_title(self, default: str) -> str:
        """First suggested title, or ``default`` when none is usable.

        A missing ``titles`` key, an empty list and a fallback payload are all
        treated the same way.
        """
        titles = self.viral_concept.get("titles") if isinstance(self.viral_concept, Mapping) else None
        if isinstance(titles, list) and titles:
            first = titles[0]
            if isinstance(first, str) and first.strip():
                return first.strip()
        return default

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {key.value: self.section(key) for key in SectionKey}

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ResearchPackage":
        values = {}
        for key, attr in ResearchPackage._ATTRS.items():
            payload = data.get(key.value) if isinstance(data, Mapping) else None
            values[attr] = dict(payload) if isinstance(payload, Mapping) else {}
        return ResearchPackage(**values)


@dataclass(frozen=True)
class ProgressEvent:
    status: EventStatus
    section: Optional[SectionKey] = None
    label: Optional[str] = None
    data: Optional[Mapping[str, Any]] = None
    error: Optional[str] = None
    id: Optional[str] = None

    @staticmethod
    def generating(section: SectionKey, label: str) -> "ProgressEvent":
        return ProgressEvent(status=EventStatus.GENERATING, section=section, label=label)

    @staticmethod
    def complete(section: SectionKey, data: Mapping[str, Any]) -> "ProgressEvent":
        return ProgressEvent(status=EventStatus.COMPLETE, section=section, data=data)

    @staticmethod
    def failed(message: str, section: Optional[SectionKey] = None) -> "ProgressEvent":
        return ProgressEvent(status=EventStatus.ERROR, section=section, error=message)

    @staticmethod
    def done(idea_id: str, package: ResearchPackage) -> "ProgressEvent":
        return ProgressEvent(status=EventStatus.DONE, id=idea_id, data=package.to_dict())

    @property
    def is_terminal(self) -> bool:
        return self.status in (EventStatus.DONE, EventStatus.ERROR)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": self.status.value}
        if self.section is not None:
            payload["section"] = self.section.value
        if self.label is not None:
            payload["label"] = self.label
        if self.id is not None:
            payload["id"] = self.id
        if self.data is not None:
            # the finished package travels under its own wire name
            data_key = "researchData" if self.status is EventStatus.DONE else "data"
            payload[data_key] = dict(self.data)
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass
class PersistedIdea:
    id: str
    topic: str
    style: Optional[str]
    package: ResearchPackage
    automated: bool = False
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "topic": self.topic,
            "style": self.style,
            "research_data": self.package.to_dict(),
            "created_via_cron": self.automated,
            "created_at": self.created_at,
        }
