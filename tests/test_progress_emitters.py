import json

from ai_agents.services.models import ProgressEvent, ResearchPackage, SectionKey
from ai_agents.services.progress import (
    BufferedEmitter,
    ProgressEmitter,
    StreamingEmitter,
    encode_event,
)


def test_encode_event_is_single_sse_data_line():
    encoded = encode_event(ProgressEvent.generating(SectionKey.STORY_STRUCTURE, "Building story structure..."))
    assert encoded.startswith("data: ")
    assert encoded.endswith("\n\n")
    assert encoded.count("\n") == 2
    assert json.loads(encoded[len("data: "):]) == {
        "status": "generating",
        "section": "storyStructure",
        "label": "Building story structure...",
    }


def test_both_emitters_satisfy_protocol():
    assert isinstance(BufferedEmitter(), ProgressEmitter)
    assert isinstance(StreamingEmitter(), ProgressEmitter)


def test_buffered_emitter_ignores_intermediate_events():
    emitter = BufferedEmitter()
    emitter.emit(ProgressEvent.generating(SectionKey.VIRAL_CONCEPT, "..."))
    assert emitter.last_event is None
    emitter.emit(ProgressEvent.failed("boom"))
    assert emitter.last_event.error == "boom"
    assert emitter.cancelled is False


def test_streaming_emitter_yields_in_order_until_closed():
    emitter = StreamingEmitter()
    emitter.emit(ProgressEvent.generating(SectionKey.VIRAL_CONCEPT, "a"))
    emitter.emit(ProgressEvent.done("id-1", ResearchPackage()))
    emitter.close()

    chunks = list(emitter.iter_events())
    assert len(chunks) == 2
    assert json.loads(chunks[1][len("data: "):])["id"] == "id-1"
    assert emitter.closed
    assert not emitter.cancelled


def test_close_is_idempotent():
    emitter = StreamingEmitter()
    assert emitter.close() is True
    assert emitter.close() is False
    emitter.emit(ProgressEvent.failed("late"))
    assert list(emitter.iter_events()) == []


def test_consumer_exit_cancels_the_stream():
    emitter = StreamingEmitter()
    emitter.emit(ProgressEvent.generating(SectionKey.VIRAL_CONCEPT, "a"))
    emitter.emit(ProgressEvent.generating(SectionKey.BACKGROUND_RESEARCH, "b"))

    events = emitter.iter_events()
    next(events)
    events.close()

    assert emitter.cancelled
    assert emitter.closed
    emitter.emit(ProgressEvent.failed("ignored"))


def test_closing_unread_body_cancels_the_stream():
    emitter = StreamingEmitter()
    body = emitter.iter_events()
    body.close()

    assert emitter.cancelled
    assert emitter.closed
    assert list(body) == []


def test_closing_drained_body_does_not_cancel():
    emitter = StreamingEmitter()
    emitter.emit(ProgressEvent.failed("boom"))
    emitter.close()

    body = emitter.iter_events()
    assert len(list(body)) == 1
    body.close()
    assert not emitter.cancelled


def test_emit_never_blocks_without_a_reader():
    emitter = StreamingEmitter()
    for _ in range(500):
        emitter.emit(ProgressEvent.generating(SectionKey.VIRAL_CONCEPT, "a"))
    emitter.iter_events().close()

    assert emitter.cancelled
    emitter.emit(ProgressEvent.failed("ignored"))
