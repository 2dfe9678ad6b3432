import json
from dataclasses import replace

import pytest

from ai_agents.services.stages import STAGES
from conftest import FakeGenerator
from server import create_app


def _events(response):
    body = response.get_data(as_text=True)
    return [json.loads(block[len("data: "):]) for block in body.split("\n\n") if block.startswith("data: ")]


def test_research_stream_happy_path(make_client):
    client, services = make_client()
    resp = client.post("/api/research", json={"topic": "Operation Paperclip", "style": "noir"})

    assert resp.status_code == 200
    assert resp.mimetype == "text/event-stream"
    assert resp.headers["Cache-Control"] == "no-cache"

    events = _events(resp)
    assert [e["status"] for e in events] == ["generating", "complete"] * len(STAGES) + ["done"]
    assert [e["section"] for e in events[:-1:2]] == [stage.key.value for stage in STAGES]

    done = events[-1]
    assert len(done["researchData"]) == 7
    stored = services.repository.get_idea_by_id(done["id"])
    assert stored is not None
    assert stored.style == "noir"
    assert stored.automated is False


@pytest.mark.parametrize("payload", [{}, {"topic": ""}, {"topic": "   "}, {"topic": 42}, {"style": "noir"}])
def test_research_rejects_missing_topic(make_client, payload):
    generator = FakeGenerator()
    client, _ = make_client(generator=generator)
    resp = client.post("/api/research", json=payload)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Topic is required"}
    assert generator.calls == []


def test_research_rejects_non_json_body(make_client):
    client, _ = make_client()
    resp = client.post("/api/research", data="topic=x", content_type="text/plain")
    assert resp.status_code == 400


def test_research_stream_ends_with_error_event(make_client):
    client, services = make_client(generator=FakeGenerator(fail_on_call=2))
    resp = client.post("/api/research", json={"topic": "Operation Paperclip"})

    events = _events(resp)
    assert [e["status"] for e in events] == ["generating", "complete", "generating", "error"]
    assert "upstream timeout" in events[-1]["error"]
    assert services.repository.get_all_ideas() == []


def test_research_without_api_key_returns_json_error(settings):
    app = create_app("testing", settings=replace(settings, GEMINI_API_KEY=""))
    app.testing = True
    resp = app.test_client().post("/api/research", json={"topic": "Operation Paperclip"})
    assert resp.status_code == 500
    assert "GEMINI_API_KEY" in resp.get_json()["error"]


def test_ideas_list_get_and_delete(make_client):
    client, _ = make_client()
    first = _events(client.post("/api/research", json={"topic": "Operation Paperclip"}))[-1]["id"]
    second = _events(client.post("/api/research", json={"topic": "MKUltra"}))[-1]["id"]

    listing = client.get("/api/ideas").get_json()["ideas"]
    assert [idea["id"] for idea in listing] == [second, first]

    searched = client.get("/api/ideas?search=mkultra").get_json()["ideas"]
    assert [idea["id"] for idea in searched] == [second]

    detail = client.get(f"/api/ideas/{first}")
    assert detail.status_code == 200
    assert detail.get_json()["idea"]["topic"] == "Operation Paperclip"

    assert client.delete(f"/api/ideas/{first}").get_json() == {"success": True}
    assert client.get(f"/api/ideas/{first}").status_code == 404
    assert client.delete(f"/api/ideas/{first}").status_code == 404
