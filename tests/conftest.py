"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest
from fakes import FakeSink, StubSession, make_dispatcher

from mcp_agents.protocol.dispatcher import RequestDispatcher


@pytest.fixture()
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture()
def session() -> StubSession:
    return StubSession()


@pytest.fixture()
def dispatcher(session: StubSession) -> RequestDispatcher:
    return make_dispatcher(session)
