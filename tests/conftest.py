import json
import os
import sys
from dataclasses import replace

import pytest

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from ai_agents.services.models import SectionKey
from server import create_app
from server.config.settings import load_settings
from server.data_access.idea_repository import IdeaRepository
from server.services.container import ResearchServices
from storage.sqlite import database


SAMPLE_SECTIONS = {
    SectionKey.VIRAL_CONCEPT: {
        "titles": ["The Nazi Scientists Who Built America", "Paperclip"],
        "hook": "What if the moon landing was built by war criminals?",
    },
    SectionKey.BACKGROUND_RESEARCH: {"summary": "After WWII the US recruited German scientists.", "keyFacts": ["1945"]},
    SectionKey.INTERVIEW_TARGETS: {"targets": [{"name": "Historian", "role": "Expert"}]},
    SectionKey.DOCUMENTS_AND_DATA: {"documents": [{"title": "JIOA files"}]},
    SectionKey.FOIA_SUGGESTIONS: {"requests": [{"agency": "NARA"}]},
    SectionKey.STORY_STRUCTURE: {"acts": [{"title": "Act I"}]},
    SectionKey.VISUAL_SUGGESTIONS: {"archivalFootage": ["V-2 launch reels"]},
}


class FakeGenerator:
    """Generation client double; answers by matching the stage prompt."""

    def __init__(self, responses=None, *, fail_on_call=None, topic="Operation Paperclip"):
        self.calls = []
        self.responses = list(responses) if responses is not None else [
            "```json\n" + json.dumps(payload) + "\n```" for payload in SAMPLE_SECTIONS.values()
        ]
        self.fail_on_call = fail_on_call
        self.topic = topic

    def generate_section(self, system_prompt, user_prompt, temperature):
        self.calls.append((system_prompt, user_prompt, temperature))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise RuntimeError("upstream timeout")
        if user_prompt.startswith("Generate one viral documentary topic"):
            return f'"{self.topic}"'
        index = sum(1 for _, prompt, _ in self.calls if not prompt.startswith("Generate one viral")) - 1
        return self.responses[index % len(self.responses)]


class RecordingEmitter:
    def __init__(self, cancel_after=None):
        self.events = []
        self.cancel_after = cancel_after

    @property
    def cancelled(self):
        return self.cancel_after is not None and len(self.events) >= self.cancel_after

    def emit(self, event):
        self.events.append(event)

    def statuses(self):
        return [(event.status.value, event.section.value if event.section else None) for event in self.events]


class FakeRepository:
    def __init__(self, error=None):
        self.saved = []
        self.error = error

    def save_idea(self, idea_id, topic, style, package, automated=False):
        if self.error is not None:
            raise self.error
        self.saved.append((idea_id, topic, style, package, automated))


class FakeNotifier:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def send(self, *, from_address, to, subject, html_body):
        if self.error is not None:
            raise self.error
        self.sent.append({"from": from_address, "to": list(to), "subject": subject, "html": html_body})
        return "email-1"


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    db_path = tmp_path / "test_deepcut.db"
    monkeypatch.setattr(database, "DB_PATH", db_path)
    return db_path


@pytest.fixture
def settings(temp_db):
    return replace(
        load_settings("testing", environ={}),
        DATABASE_PATH=str(temp_db),
        GEMINI_API_KEY="test-key",
        CRON_SECRET="s3cret",
        EMAIL_TO="producer@example.com",
    )


@pytest.fixture
def make_client(settings):
    def _make(generator=None, notifier=None, **overrides):
        app_settings = replace(settings, **overrides)
        generator = generator or FakeGenerator()
        services = ResearchServices(
            settings=app_settings,
            repository=IdeaRepository(app_settings.DATABASE_PATH),
            client_factory=lambda: generator,
            notifier=notifier,
        )
        app = create_app("testing", settings=app_settings, services=services)
        app.testing = True
        return app.test_client(), services

    return _make
