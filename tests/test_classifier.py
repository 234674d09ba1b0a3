"""Tests for the language model backend."""

import pytest

from digestigo.exceptions import ClassifierUnavailable
from digestigo.services import ClassificationRequestBuilder, Classifier, LLMClassifier

from conftest import CannedClassifier, run


@pytest.fixture
def request_():
    return ClassificationRequestBuilder().build_request("I feel bloated")


def test_fakes_satisfy_protocol():
    assert isinstance(CannedClassifier("x"), Classifier)
    assert isinstance(LLMClassifier(), Classifier)


def test_unconfigured_raises(settings, request_):
    classifier = LLMClassifier(settings)

    assert classifier.is_configured is False
    with pytest.raises(ClassifierUnavailable):
        run(classifier.classify(request_))


def test_falls_back_to_claude(settings, request_, monkeypatch):
    settings.groq_api_key = "gsk-test"
    settings.anthropic_api_key = "sk-ant-test"
    classifier = LLMClassifier(settings)
    calls = []

    async def groq_fails(request):
        calls.append("groq")
        return None

    async def claude_answers(request):
        calls.append("claude")
        return '{"categories": ["symptom"]}'

    monkeypatch.setattr(classifier, "_try_groq", groq_fails)
    monkeypatch.setattr(classifier, "_try_claude", claude_answers)

    assert run(classifier.classify(request_)) == '{"categories": ["symptom"]}'
    assert calls == ["groq", "claude"]


def test_all_providers_fail(settings, request_, monkeypatch):
    settings.groq_api_key = "gsk-test"
    classifier = LLMClassifier(settings)

    async def groq_fails(request):
        return None

    monkeypatch.setattr(classifier, "_try_groq", groq_fails)

    with pytest.raises(ClassifierUnavailable):
        run(classifier.classify(request_))


def test_blank_keys_are_not_configured(settings, request_):
    settings.groq_api_key = ""
    settings.anthropic_api_key = ""
    classifier = LLMClassifier(settings)

    assert settings.has_groq is False
    assert settings.has_claude is False
    with pytest.raises(ClassifierUnavailable):
        run(classifier.classify(request_))
