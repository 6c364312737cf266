"""Tests for the Gemini coaching capability."""

from types import SimpleNamespace

import pytest
from google.genai import errors

from barista_log.coaching.gemini import DEFAULT_MODEL, GeminiCoach
from barista_log.exceptions import (
    AnalysisFailure,
    AuthenticationError,
    CapabilityUnavailableError,
    RateLimitError,
)


class FakeClientError(errors.ClientError):
    def __init__(self, message):
        Exception.__init__(self, message)

    def __str__(self):
        return self.args[0]


def _client(generate_content):
    return SimpleNamespace(models=SimpleNamespace(generate_content=generate_content))


def test_generate_sends_instructions_and_prompt():
    captured = {}

    def generate_content(model, contents, config):
        captured.update(model=model, contents=contents, config=config)
        return SimpleNamespace(text="  Great shot. Grind a bit finer.  ")

    coach = GeminiCoach(model="test-model", client=_client(generate_content))

    text = coach.generate("Be a coach.", "Analyze this shot:\n")

    assert text == "Great shot. Grind a bit finer."
    assert captured["model"] == "test-model"
    assert captured["contents"] == ["Analyze this shot:\n"]
    assert captured["config"].system_instruction == "Be a coach."


def test_unavailable_without_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    coach = GeminiCoach()

    assert not coach.is_available()
    with pytest.raises(CapabilityUnavailableError):
        coach.generate("instructions", "prompt")


def test_model_falls_back_to_env_then_default(monkeypatch):
    monkeypatch.setenv("BARISTA_LOG_COACH_MODEL", "env-model")
    assert GeminiCoach(client=_client(None)).model == "env-model"

    monkeypatch.delenv("BARISTA_LOG_COACH_MODEL")
    assert GeminiCoach(client=_client(None)).model == DEFAULT_MODEL


@pytest.mark.parametrize(
    "message, expected",
    [
        ("429 RESOURCE_EXHAUSTED: quota exceeded", RateLimitError),
        ("400 API key not valid", AuthenticationError),
        ("400 INVALID_ARGUMENT", AnalysisFailure),
    ],
)
def test_client_errors_are_classified(message, expected):
    def generate_content(model, contents, config):
        raise FakeClientError(message)

    coach = GeminiCoach(client=_client(generate_content))

    with pytest.raises(expected):
        coach.generate("instructions", "prompt")


def test_unexpected_error_becomes_analysis_failure():
    def generate_content(model, contents, config):
        raise ConnectionError("offline")

    coach = GeminiCoach(client=_client(generate_content))

    with pytest.raises(AnalysisFailure, match="offline"):
        coach.generate("instructions", "prompt")


def test_empty_response_is_a_failure():
    coach = GeminiCoach(client=_client(lambda model, contents, config: SimpleNamespace(text=None)))

    with pytest.raises(AnalysisFailure):
        coach.generate("instructions", "prompt")


def test_metadata():
    coach = GeminiCoach(model="test-model", client=_client(None))
    assert coach.get_metadata() == {"provider": "gemini", "model": "test-model"}
