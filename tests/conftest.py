"""
Pytest configuration and fixtures
"""
from datetime import datetime, timedelta, timezone

import pytest

from flowchat.domain.flow.app import UssdApp
from flowchat.domain.flow.context import ConversationContext
from flowchat.domain.models.conversation import PlatformMetadata
from flowchat.domain.session.memory_session_store import InMemorySessionStore
from flowchat.infrastructure.config.settings import FlowChatSettings, PaginationSettings


class FakeClock:
    """Controllable clock for TTL tests"""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds: int):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session_backend():
    """Shared dict standing in for the session backend"""
    return {}


@pytest.fixture
def make_settings():
    """Create engine settings with optional pagination overrides"""

    def _make(**pagination):
        return FlowChatSettings(pagination=PaginationSettings(**pagination))

    return _make


@pytest.fixture
def make_context(session_backend):
    """Create a turn context with an in-memory session attached"""

    def _make(input=None, session_id="session-1", app_class=UssdApp, settings=None, **metadata):
        context = ConversationContext(
            session_id=session_id,
            input=input,
            metadata=PlatformMetadata(**metadata),
            settings=settings or FlowChatSettings()
        )
        context.session = InMemorySessionStore(session_id, session_backend)
        context.app_class = app_class
        return context

    return _make
