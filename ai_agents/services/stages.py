"""
Ordered stage table for the research pipeline.

The order of ``STAGES`` is part of the external contract: progress events and the
assembled package follow it exactly.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ai_agents import prompts
from ai_agents.services.models import SectionKey


@dataclass(frozen=True)
class Stage:
    key: SectionKey
    prompt: str
    temperature: float
    label: str

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"Stage '{self.key.value}' temperature must be within [0, 1]")


@dataclass(frozen=True)
class TopicDiscoveryStage:
    prompt: str = prompts.DAILY_TOPIC_PROMPT
    user_prompt: str = "Generate one viral documentary topic for today."
    temperature: float = 0.9


STAGES: Tuple[Stage, ...] = (
    Stage(SectionKey.VIRAL_CONCEPT, prompts.VIRAL_CONCEPT_PROMPT, 0.7, "Crafting viral concept & angle..."),
    Stage(SectionKey.BACKGROUND_RESEARCH, prompts.BACKGROUND_RESEARCH_PROMPT, 0.4, "Researching background..."),
    Stage(SectionKey.INTERVIEW_TARGETS, prompts.INTERVIEW_TARGETS_PROMPT, 0.5, "Identifying interview targets..."),
    Stage(SectionKey.DOCUMENTS_AND_DATA, prompts.DOCUMENTS_DATA_PROMPT, 0.4, "Finding documents & data sources..."),
    Stage(SectionKey.FOIA_SUGGESTIONS, prompts.FOIA_PROMPT, 0.4, "Drafting FOIA requests..."),
    Stage(SectionKey.STORY_STRUCTURE, prompts.STORY_STRUCTURE_PROMPT, 0.6, "Building story structure..."),
    Stage(SectionKey.VISUAL_SUGGESTIONS, prompts.VISUAL_SUGGESTIONS_PROMPT, 0.5, "Planning visual elements..."),
)

TOPIC_DISCOVERY = TopicDiscoveryStage()
