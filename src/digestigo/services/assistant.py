"""Conversational replies and the persisted chat log."""

import logging

from pydantic import TypeAdapter, ValidationError

from ..exceptions import StorageReadError
from ..models.chat import ChatMessage
from .backends import Store
from .classifier import Classifier
from .request_builder import ClassifierRequest

logger = logging.getLogger(__name__)

_messages_adapter = TypeAdapter(list[ChatMessage])


class ChatAssistant:
    """Digestive health assistant that answers the user's messages."""

    SYSTEM_PROMPT = """You are Digestigo, a helpful and empathetic digestive health assistant.

CRITICAL: Keep responses SHORT and conversational (2-4 sentences max). Be concise and friendly.

Your role:
1. Show empathy briefly ("That sounds uncomfortable" or "I understand")
2. Give ONE potential cause
3. Suggest ONE practical tip
4. Only mention seeing a doctor if it's serious

Example good responses:
- "That sounds uncomfortable. Pizza is often high in fat and dairy, which can slow digestion. Try smaller portions and see if that helps!"
- "I understand that's frustrating. Bloating after meals is often from eating too quickly. Try chewing slowly and avoiding carbonated drinks."

Keep it natural, brief, and helpful. You're an AI assistant, not a doctor."""

    ERROR_TEXT = "Sorry, an error occurred. Please try again."

    # Older turns are dropped to keep the prompt small
    MAX_HISTORY = 20

    def __init__(self, classifier: Classifier):
        self.classifier = classifier

    async def reply(self, history: list[ChatMessage]) -> str:
        """
        Answer the last user message.

        Raises:
            ClassifierUnavailable: if no reply could be generated
        """
        turns = [m for m in history if m.role != "system"][-self.MAX_HISTORY:]
        request = ClassifierRequest(
            messages=[ChatMessage(role="system", content=self.SYSTEM_PROMPT), *turns],
            temperature=0.7,
            max_tokens=200,
        )
        return (await self.classifier.classify(request)).strip()


class ChatHistory:
    """Chat messages stored as one JSON array under a single key."""

    GREETING = (
        "Hi! I'm your digestive health assistant. How are you feeling today? "
        "Feel free to share any stomach issues or digestive concerns you're experiencing."
    )

    def __init__(self, store: Store, key: str = "chat_messages"):
        self.store = store
        self.key = key

    async def load(self) -> list[ChatMessage]:
        """Saved messages, or just the greeting for a new conversation."""
        try:
            raw = await self.store.get(self.key)
            if raw:
                return _messages_adapter.validate_json(raw)
        except (StorageReadError, ValidationError) as e:
            logger.warning("Could not load chat history: %s", e)
        return [ChatMessage(role="assistant", content=self.GREETING)]

    async def append(self, *messages: ChatMessage) -> list[ChatMessage]:
        history = await self.load()
        history.extend(messages)
        await self.store.set(self.key, _messages_adapter.dump_json(history).decode())
        return history

    async def clear(self) -> None:
        await self.store.remove(self.key)

