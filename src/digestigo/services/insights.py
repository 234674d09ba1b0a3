"""Natural-language health summary, cached between sessions."""

import logging
from typing import Optional

from ..exceptions import ClassifierUnavailable, StorageReadError
from ..models.chat import ChatMessage
from ..models.summary import SummaryItem, TrackingSummary
from .backends import Store
from .classifier import Classifier
from .request_builder import ClassifierRequest

logger = logging.getLogger(__name__)


class HealthInsightService:
    """
    Turns a tracking summary into a short written overview.

    The last generated text is cached under its own storage key so the
    tracker can show it without calling the model again. It is derived data:
    losing it only means regenerating.
    """

    SYSTEM_PROMPT = "You are a digestive health analyst. Provide brief, helpful summaries."

    EMPTY_TEXT = "Start tracking to see your health insights"
    FALLBACK_TEXT = "Your digestive health tracking is helping identify patterns."

    MAX_ITEMS = 5

    def __init__(self, store: Store, classifier: Classifier, key: str = "health_summary"):
        self.store = store
        self.classifier = classifier
        self.key = key

    async def cached(self) -> Optional[str]:
        """The last generated summary, if any."""
        try:
            return await self.store.get(self.key)
        except StorageReadError as e:
            logger.warning("Could not read cached health summary: %s", e)
            return None

    async def generate(self, summary: TrackingSummary) -> str:
        """Write a fresh summary and cache it."""
        if summary.is_empty:
            return self.EMPTY_TEXT

        request = ClassifierRequest(
            messages=[
                ChatMessage(role="system", content=self.SYSTEM_PROMPT),
                ChatMessage(role="user", content=self.build_prompt(summary)),
            ],
            temperature=0.7,
            max_tokens=100,
        )

        try:
            text = (await self.classifier.classify(request)).strip()
        except ClassifierUnavailable as e:
            logger.warning("Falling back to generic health summary: %s", e)
            text = ""

        text = text or self.FALLBACK_TEXT
        await self.store.set(self.key, text)
        return text

    async def clear(self) -> None:
        await self.store.remove(self.key)

    def build_prompt(self, summary: TrackingSummary) -> str:
        dietary = summary.dietary
        if dietary.total > 0:
            dietary_text = (
                f"{dietary.carbs} carbs, {dietary.proteins} proteins, "
                f"{dietary.dairy} dairy, {dietary.fibre} fibre"
            )
        else:
            dietary_text = "none"

        return (
            "Based on this health data, provide a brief 2-sentence summary of potential "
            "digestive concerns:\n"
            f"Symptoms: {self._join(summary.symptoms)}\n"
            f"Triggers: {self._join(summary.triggers)}\n"
            f"Diet: {dietary_text}\n\n"
            "Write a helpful, empathetic summary that identifies patterns. "
            "Keep it under 40 words."
        )

    def _join(self, items: tuple[SummaryItem, ...]) -> str:
        if not items:
            return "none"
        return ", ".join(item.summary for item in items[: self.MAX_ITEMS])
