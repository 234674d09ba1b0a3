"""Aggregation of tracking entries into summaries."""

from collections import Counter
from typing import Iterable, Optional

from ..models.summary import DietaryBreakdown, SummaryItem, TrackingSummary
from ..models.tracking import Category, FoodCategory, TrackingEntry
from .storage import EntryStore


def percentage(count: int, total: int) -> int:
    """
    Share of ``count`` in ``total`` as a whole percentage.

    Rounds half up (12.5 -> 13) using integer arithmetic, so every consumer
    gets the same number. Returns 0 when there is nothing to divide.
    """
    if total <= 0:
        return 0
    return (200 * count + total) // (2 * total)


def dietary_percentages(dietary: DietaryBreakdown) -> dict[str, int]:
    """Percentage of each food category among categorized dietary entries."""
    total = dietary.total
    return {fc.value: percentage(dietary.count(fc), total) for fc in FoodCategory}


class Aggregator:
    """
    Derives a :class:`TrackingSummary` from tracking entries.

    Summaries are pure functions of the entry sequence: the same entries
    always give the same summary, with symptoms and triggers in insertion
    order.
    """

    def __init__(self, store: Optional[EntryStore] = None):
        self.store = store

    def summarize(self, entries: Iterable[TrackingEntry]) -> TrackingSummary:
        entries = list(entries)

        symptoms = tuple(
            self._item(e) for e in entries if e.category == Category.SYMPTOM
        )
        triggers = tuple(
            self._item(e) for e in entries if e.category == Category.TRIGGER
        )

        counts = Counter(
            e.food_category.value
            for e in entries
            if e.category == Category.DIETARY and e.food_category is not None
        )

        return TrackingSummary(
            symptoms=symptoms,
            triggers=triggers,
            dietary=DietaryBreakdown(**counts),
            total_entries=len(entries),
        )

    async def current(self) -> TrackingSummary:
        """Summary of everything in the attached entry store."""
        if self.store is None:
            return TrackingSummary()
        return self.summarize(await self.store.all())

    @staticmethod
    def _item(entry: TrackingEntry) -> SummaryItem:
        return SummaryItem(
            summary=entry.summary,
            keywords=entry.keywords,
            timestamp=entry.timestamp,
        )
