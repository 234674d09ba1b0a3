"""Tests for the cached health summary and the chat assistant."""

from datetime import datetime

import pytest

from digestigo.exceptions import ClassifierUnavailable
from digestigo.models import ChatMessage, DietaryBreakdown, SummaryItem, TrackingSummary
from digestigo.services import ChatAssistant, ChatHistory, HealthInsightService, MemoryStore

from conftest import CannedClassifier, UnavailableClassifier, run


def item(text):
    return SummaryItem(summary=text, timestamp=datetime(2025, 3, 1))


@pytest.fixture
def summary():
    return TrackingSummary(
        symptoms=tuple(item(f"Symptom {i}") for i in range(7)),
        triggers=(item("Pizza may trigger bloating - watch out"),),
        dietary=DietaryBreakdown(carbs=2, dairy=1),
        total_entries=11,
    )


class TestHealthInsightService:
    """Tests for HealthInsightService."""

    def test_generate_caches_reply(self, memory_store, summary):
        classifier = CannedClassifier("You seem sensitive to carbs.")
        service = HealthInsightService(memory_store, classifier)

        assert run(service.generate(summary)) == "You seem sensitive to carbs."
        assert run(service.cached()) == "You seem sensitive to carbs."

        prompt = classifier.requests[0].messages[-1].content
        assert "Symptom 4" in prompt
        assert "Symptom 5" not in prompt
        assert "Triggers: Pizza may trigger bloating - watch out" in prompt
        assert "Diet: 2 carbs, 0 proteins, 1 dairy, 0 fibre" in prompt

    def test_empty_summary_skips_model(self, memory_store):
        classifier = CannedClassifier("unused")
        service = HealthInsightService(memory_store, classifier)

        assert run(service.generate(TrackingSummary())) == HealthInsightService.EMPTY_TEXT
        assert classifier.requests == []
        assert run(service.cached()) is None

    def test_prompt_with_no_data_sections(self, memory_store):
        service = HealthInsightService(memory_store, CannedClassifier("ok"))
        prompt = service.build_prompt(TrackingSummary(total_entries=1))

        assert "Symptoms: none" in prompt
        assert "Triggers: none" in prompt
        assert "Diet: none" in prompt

    def test_fallback_when_unavailable(self, memory_store, summary):
        service = HealthInsightService(memory_store, UnavailableClassifier())

        assert run(service.generate(summary)) == HealthInsightService.FALLBACK_TEXT
        assert run(service.cached()) == HealthInsightService.FALLBACK_TEXT

    def test_clear(self, memory_store, summary):
        service = HealthInsightService(memory_store, CannedClassifier("text"))
        run(service.generate(summary))
        run(service.clear())
        assert run(service.cached()) is None


class TestChatAssistant:
    """Tests for ChatAssistant."""

    def test_reply_includes_system_prompt_and_history(self):
        classifier = CannedClassifier("  That sounds uncomfortable.  ")
        history = [
            ChatMessage(role="assistant", content=ChatHistory.GREETING),
            ChatMessage(role="user", content="I feel bloated"),
        ]

        assert run(ChatAssistant(classifier).reply(history)) == "That sounds uncomfortable."

        request = classifier.requests[0]
        assert request.messages[0].role == "system"
        assert [m.content for m in request.messages[1:]] == [ChatHistory.GREETING, "I feel bloated"]
        assert request.temperature == 0.7

    def test_history_is_capped(self):
        classifier = CannedClassifier("ok")
        history = [ChatMessage(role="user", content=str(i)) for i in range(50)]
        run(ChatAssistant(classifier).reply(history))

        sent = classifier.requests[0].messages[1:]
        assert len(sent) == ChatAssistant.MAX_HISTORY
        assert sent[-1].content == "49"

    def test_failure_propagates(self):
        with pytest.raises(ClassifierUnavailable):
            run(ChatAssistant(UnavailableClassifier()).reply([]))


class TestChatHistory:
    """Tests for ChatHistory."""

    def test_new_conversation_starts_with_greeting(self, memory_store):
        history = run(ChatHistory(memory_store).load())
        assert len(history) == 1
        assert history[0].role == "assistant"

    def test_append_and_reload(self, memory_store):
        chat = ChatHistory(memory_store)
        run(chat.append(
            ChatMessage(role="user", content="hi"),
            ChatMessage(role="assistant", content="hello"),
        ))

        reloaded = run(ChatHistory(memory_store).load())
        assert [m.content for m in reloaded][1:] == ["hi", "hello"]

    def test_corrupt_history_resets(self):
        chat = ChatHistory(MemoryStore({"chat_messages": "[{]"}))
        assert len(run(chat.load())) == 1

    def test_clear(self, memory_store):
        chat = ChatHistory(memory_store)
        run(chat.append(ChatMessage(role="user", content="hi")))
        run(chat.clear())
        assert len(run(chat.load())) == 1
