import pytest

from ai_agents.services.models import (
    EventStatus,
    GenerationRequest,
    ProgressEvent,
    ResearchPackage,
    SectionKey,
)
from ai_agents.services.stages import STAGES, Stage


def test_stage_table_order_and_temperatures():
    assert [stage.key for stage in STAGES] == list(SectionKey)
    assert [stage.temperature for stage in STAGES] == [0.7, 0.4, 0.5, 0.4, 0.4, 0.6, 0.5]
    assert all(stage.label.endswith("...") for stage in STAGES)


def test_stage_rejects_out_of_range_temperature():
    with pytest.raises(ValueError):
        Stage(SectionKey.VIRAL_CONCEPT, "prompt", 1.5, "label")


def test_user_context_with_and_without_style():
    assert GenerationRequest("Operation Paperclip").user_context() == 'Documentary topic: "Operation Paperclip"'
    assert GenerationRequest("Operation Paperclip", "noir").user_context() == (
        'Documentary topic: "Operation Paperclip" The documentary style/tone should be: noir.'
    )


def test_package_round_trips_camel_case_keys():
    package = ResearchPackage.from_dict({"viralConcept": {"titles": ["T"]}, "storyStructure": {"acts": []}})
    data = package.to_dict()
    assert list(data) == [key.value for key in SectionKey]
    assert data["viralConcept"] == {"titles": ["T"]}
    assert data["backgroundResearch"] == {}


@pytest.mark.parametrize(
    "viral_concept",
    [{}, {"titles": []}, {"titles": [""]}, {"titles": "not a list"}, {"raw": "prose"}],
)
def test_top_title_falls_back_to_topic(viral_concept):
    package = ResearchPackage(viral_concept=viral_concept)
    assert package.top_title("Operation Paperclip") == "Operation Paperclip"


def test_top_title_uses_first_title():
    package = ResearchPackage(viral_concept={"titles": ["  Rocket Men  ", "Other"]})
    assert package.top_title("fallback") == "Rocket Men"


def test_progress_event_wire_format():
    package = ResearchPackage(viral_concept={"titles": ["T"]})
    assert ProgressEvent.generating(SectionKey.VIRAL_CONCEPT, "Working...").to_dict() == {
        "status": "generating",
        "section": "viralConcept",
        "label": "Working...",
    }
    assert ProgressEvent.complete(SectionKey.VIRAL_CONCEPT, {"a": 1}).to_dict() == {
        "status": "complete",
        "section": "viralConcept",
        "data": {"a": 1},
    }
    done = ProgressEvent.done("abc", package)
    assert done.status is EventStatus.DONE
    assert done.to_dict() == {"status": "done", "id": "abc", "researchData": package.to_dict()}
    assert ProgressEvent.failed("boom").to_dict() == {"status": "error", "error": "boom"}
