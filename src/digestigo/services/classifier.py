"""Language model backend for categorization and replies."""

import logging
from typing import Optional, Protocol, runtime_checkable

import anthropic
import httpx
from openai import AsyncOpenAI, APIError

from ..exceptions import ClassifierUnavailable
from ..utils.config import Settings, get_settings
from .request_builder import ClassifierRequest

logger = logging.getLogger(__name__)


@runtime_checkable
class Classifier(Protocol):
    """Text-in, text-out oracle. Usually answers with near-JSON."""

    async def classify(self, request: ClassifierRequest) -> str: ...


class LLMClassifier:
    """
    Sends role-tagged prompts to a hosted language model.

    Tries providers in order: Groq (OpenAI-compatible API) → Claude.
    Raises ``ClassifierUnavailable`` when neither produced a completion.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._groq_client: Optional[AsyncOpenAI] = None
        self._anthropic_client: Optional[anthropic.AsyncAnthropic] = None

    @property
    def groq_client(self) -> Optional[AsyncOpenAI]:
        if self._groq_client is None and self.settings.groq_api_key:
            self._groq_client = AsyncOpenAI(
                api_key=self.settings.groq_api_key,
                base_url=self.settings.groq_base_url,
                timeout=httpx.Timeout(30.0, connect=5.0),
                max_retries=1,
            )
        return self._groq_client

    @property
    def anthropic_client(self) -> Optional[anthropic.AsyncAnthropic]:
        if self._anthropic_client is None and self.settings.anthropic_api_key:
            self._anthropic_client = anthropic.AsyncAnthropic(
                api_key=self.settings.anthropic_api_key,
                timeout=httpx.Timeout(30.0, connect=5.0),
                max_retries=1,
            )
        return self._anthropic_client

    @property
    def has_groq(self) -> bool:
        return self.settings.has_groq

    @property
    def has_claude(self) -> bool:
        return self.settings.has_claude

    @property
    def is_configured(self) -> bool:
        return self.has_groq or self.has_claude

    async def classify(self, request: ClassifierRequest) -> str:
        """
        Get a completion for the request.

        Returns:
            The model's raw text
        """
        if not self.is_configured:
            raise ClassifierUnavailable("No LLM provider configured")

        if self.has_groq:
            text = await self._try_groq(request)
            if text:
                return text

        if self.has_claude:
            text = await self._try_claude(request)
            if text:
                return text

        raise ClassifierUnavailable("All LLM providers failed")

    async def _try_groq(self, request: ClassifierRequest) -> Optional[str]:
        """Try a completion with Groq."""
        try:
            response = await self.groq_client.chat.completions.create(
                model=self.settings.groq_model,
                messages=[m.to_prompt() for m in request.messages],
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            )
        except (APIError, httpx.HTTPError) as e:
            logger.warning("Groq request failed (%s): %s", type(e).__name__, e)
            return None

        if not response.choices:
            return None
        return (response.choices[0].message.content or "").strip() or None

    async def _try_claude(self, request: ClassifierRequest) -> Optional[str]:
        """Try a completion with Claude."""
        messages = request.conversation
        # The Messages API wants the conversation to open with the user
        while messages and messages[0]["role"] != "user":
            messages = messages[1:]
        if not messages:
            return None

        kwargs = {}
        if request.system:
            kwargs["system"] = request.system

        try:
            response = await self.anthropic_client.messages.create(
                model=self.settings.anthropic_model,
                max_tokens=request.max_tokens,
                temperature=request.temperature,
                messages=messages,
                **kwargs,
            )
        except (anthropic.APIError, httpx.HTTPError) as e:
            logger.warning("Claude request failed (%s): %s", type(e).__name__, e)
            return None

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        return text.strip() or None
