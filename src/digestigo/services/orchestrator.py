"""Message categorization and entry writing."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..exceptions import ClassifierUnavailable, StaleSessionError
from ..models.tracking import Categorization, Category, NewEntry, TrackingEntry
from .classifier import Classifier
from .request_builder import ClassificationRequestBuilder, ClassifierRequest
from .response_parser import ClassificationResponseParser, truncate
from .storage import EntryStore

logger = logging.getLogger(__name__)


@dataclass
class OrchestrationResult:
    """What happened to a message, for display next to it."""
    categories: list[Category]
    saved: bool
    summaries: dict[Category, str]
    entries: list[TrackingEntry] = field(default_factory=list)
    duplicates: list[tuple[Category, str]] = field(default_factory=list)
    discarded: bool = False  # Data was cleared while the classifier was busy

    @property
    def is_general(self) -> bool:
        return self.categories == [Category.GENERAL]


@dataclass
class OverrideResult:
    """Outcome of asking to move a message into another category."""
    requested: Category
    accepted: bool
    categories: list[Category]
    entry: Optional[TrackingEntry] = None
    discarded: bool = False

    @property
    def saved(self) -> bool:
        return self.entry is not None


class CategorizationOrchestrator:
    """
    Categorizes user messages and records them as tracking entries.

    One message can produce several entries: one per category, plus a
    ``symptom`` entry when a trigger names a symptom the message didn't
    report on its own. Classifier failures and timeouts never reach the
    caller; they are handled like unparseable output and nothing is saved.
    Storage failures do propagate.
    """

    def __init__(
        self,
        classifier: Classifier,
        entries: EntryStore,
        builder: Optional[ClassificationRequestBuilder] = None,
        parser: Optional[ClassificationResponseParser] = None,
        timeout: Optional[float] = None,
    ):
        self.classifier = classifier
        self.entries = entries
        self.builder = builder or ClassificationRequestBuilder()
        self.parser = parser or ClassificationResponseParser()
        self.timeout = timeout

    async def categorize(self, message: str) -> Categorization:
        """Classify a message without saving anything."""
        categorization = await self._classify(self.builder.build_request(message), message)
        if categorization is None:
            return self.parser.fallback(message)
        return categorization

    async def process(self, message: str) -> OrchestrationResult:
        """
        Categorize a message and save the resulting entries.

        Returns:
            The categories to display, whether anything new was saved, and
            the per-category summaries
        """
        generation = self.entries.generation
        categorization = await self.categorize(message)

        if categorization.is_general:
            return OrchestrationResult(
                categories=[Category.GENERAL],
                saved=False,
                summaries=dict(categorization.summaries),
            )

        summaries = {
            category: categorization.summary_for(category) or truncate(message)
            for category in categorization.categories
        }
        result = OrchestrationResult(
            categories=list(categorization.categories),
            saved=False,
            summaries=summaries,
        )

        pending = [
            NewEntry(
                category=category,
                message=message,
                summary=summaries[category],
                food_category=(
                    categorization.food_category if category == Category.DIETARY else None
                ),
                keywords=categorization.keywords,
            )
            for category in categorization.categories
        ]

        symptom = categorization.extracted_symptom
        if (
            Category.TRIGGER in categorization.categories
            and symptom
            and Category.SYMPTOM not in categorization.categories
        ):
            pending.append(NewEntry(
                category=Category.SYMPTOM,
                message=message,
                summary=f"Experiencing {symptom}",
                keywords=[symptom],
            ))

        for new_entry in pending:
            try:
                entry = await self.entries.append(new_entry, expected_generation=generation)
            except StaleSessionError as e:
                logger.info("Discarding entries for cleared session: %s", e)
                result.discarded = True
                break

            if entry is None:
                result.duplicates.append(new_entry.dedup_key)
            else:
                result.entries.append(entry)

        result.saved = bool(result.entries)
        return result

    async def override(
        self,
        message: str,
        category: Category,
        current: Optional[Sequence[Category]] = None,
    ) -> OverrideResult:
        """
        Move a message into a user-chosen category, if the model agrees.

        The model is asked to re-categorize the message with the requested
        category in mind. The override is accepted only when the requested
        category comes back in a reply that actually parsed. On rejection
        nothing is written and the message keeps ``current``, its existing
        categories; without them the model's own choice is reported.
        """
        generation = self.entries.generation
        request = self.builder.build_validation_request(message, category)
        validation = await self._classify(request, message)

        if validation is None or category not in validation.categories:
            if validation is None:
                logger.info("Rejected override to %s, no usable validation", category.value)
                chosen = [Category.GENERAL]
            else:
                chosen = list(validation.categories)
                logger.info(
                    "Rejected override to %s, classifier chose %s",
                    category.value,
                    ", ".join(c.value for c in chosen),
                )
            return OverrideResult(
                requested=category,
                accepted=False,
                categories=list(current) if current else chosen,
            )

        result = OverrideResult(requested=category, accepted=True, categories=[category])
        if category == Category.GENERAL:
            return result

        new_entry = NewEntry(
            category=category,
            message=message,
            summary=validation.summary_for(category) or truncate(message),
            food_category=validation.food_category if category == Category.DIETARY else None,
            keywords=validation.keywords,
        )
        try:
            result.entry = await self.entries.append(new_entry, expected_generation=generation)
        except StaleSessionError as e:
            logger.info("Discarding override for cleared session: %s", e)
            result.discarded = True
        return result

    async def _classify(self, request: ClassifierRequest, message: str) -> Optional[Categorization]:
        """Ask the classifier; None when it failed or replied with nothing usable."""
        try:
            raw = await asyncio.wait_for(self.classifier.classify(request), self.timeout)
        except ClassifierUnavailable as e:
            logger.warning("Classifier unavailable: %s", e)
            return None
        except asyncio.TimeoutError:
            logger.warning("Classifier timed out after %ss", self.timeout)
            return None
        except Exception:
            logger.exception("Classifier failed")
            return None

        return self.parser.try_parse(raw, message)
