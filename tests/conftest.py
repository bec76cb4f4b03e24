"""Pytest configuration and shared fixtures.

Everything runs against in-memory SQLite and a stub LLM client, so no
network or database server is needed.
"""

import json
import os

# Must be set before healthcheck.config is first imported.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("TYPING_DELAY_MS", "0")

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import sessionmaker

from healthcheck.db import Base
from healthcheck import models  # noqa: F401  (registers tables)
from healthcheck.llm import LLMClient
from healthcheck.services import AssessmentStore, ChatSessionController


MIGRAINE_RESPONSE = {
    "possible_conditions": [
        {
            "condition": "Migraine",
            "confidence": "medium",
            "description": "Recurrent headache often with nausea.",
        }
    ],
    "recommendations": ["Rest"],
    "notes": "",
}


class StubLLMClient(LLMClient):
    """Returns a canned reply, or raises the given error."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def chat(self, messages, temperature=0.2, model=None, response_format=None):
        self.calls.append(
            {
                "messages": messages,
                "temperature": temperature,
                "response_format": response_format,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


# -- Database ----------------------------------------------------------------

@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def store(session_factory):
    return AssessmentStore(session_factory)


# -- LLM ---------------------------------------------------------------------

@pytest.fixture
def llm_client():
    return StubLLMClient(reply=json.dumps(MIGRAINE_RESPONSE))


@pytest.fixture
def failing_llm_client():
    return StubLLMClient(error=ConnectionError("LLM endpoint unreachable"))


# -- Controller --------------------------------------------------------------

@pytest.fixture
def make_controller(store, llm_client):
    """Build a controller with zero typing delay."""

    def _make(**overrides):
        kwargs = {
            "llm_client": llm_client,
            "store": store,
            "sleep": lambda seconds: None,
            "typing_delay_ms": 0,
        }
        kwargs.update(overrides)
        return ChatSessionController(**kwargs)

    return _make


@pytest.fixture
def controller(make_controller):
    return make_controller()
