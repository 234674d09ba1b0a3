"""Tracking service wiring the pipeline together."""

import logging
from typing import Optional, Sequence

from ..models.summary import TrackingSummary
from ..models.tracking import Category, TrackingEntry
from ..utils.config import Settings, get_settings
from .analysis import Aggregator
from .backends import Store, TinyDBStore
from .classifier import Classifier, LLMClassifier
from .insights import HealthInsightService
from .orchestrator import CategorizationOrchestrator, OrchestrationResult, OverrideResult
from .storage import EntryStore

logger = logging.getLogger(__name__)


class TrackingService:
    """
    Everything the front ends need: categorize messages, read entries and
    summaries, and wipe the tracking data.

    Defaults to the TinyDB file and hosted language model from settings;
    tests pass their own store and classifier.
    """

    def __init__(
        self,
        store: Optional[Store] = None,
        classifier: Optional[Classifier] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store if store is not None else TinyDBStore(settings=self.settings)
        self.classifier = classifier if classifier is not None else LLMClassifier(self.settings)

        self.entries = EntryStore(self.store, key=self.settings.entries_key)
        self.aggregator = Aggregator(self.entries)
        self.orchestrator = CategorizationOrchestrator(
            self.classifier,
            self.entries,
            timeout=self.settings.classifier_timeout,
        )
        self.insights = HealthInsightService(
            self.store,
            self.classifier,
            key=self.settings.insight_key,
        )

    async def process_message(self, message: str) -> OrchestrationResult:
        return await self.orchestrator.process(message)

    async def override(
        self,
        message: str,
        category: Category,
        current: Optional[Sequence[Category]] = None,
    ) -> OverrideResult:
        return await self.orchestrator.override(message, category, current)

    async def list_entries(self) -> list[TrackingEntry]:
        return await self.entries.all()

    async def summary(self) -> TrackingSummary:
        return await self.aggregator.current()

    async def insight(self, refresh: bool = False) -> str:
        """Cached health summary, generated on first use or when asked."""
        if not refresh:
            cached = await self.insights.cached()
            if cached:
                return cached
        return await self.insights.generate(await self.summary())

    async def clear(self) -> None:
        """Delete all tracking entries and the cached health summary."""
        await self.entries.clear()
        await self.insights.clear()
        logger.info("Tracking data cleared")

    def close(self) -> None:
        if isinstance(self.store, TinyDBStore):
            self.store.close()

    def __enter__(self) -> "TrackingService":
        return self

    def __exit__(self, *args) -> None:
        self.close()
