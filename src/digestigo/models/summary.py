"""Aggregated tracking views."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .tracking import FoodCategory


class SummaryItem(BaseModel):
    """A symptom or trigger line as shown in the tracker and report."""

    model_config = ConfigDict(frozen=True)

    summary: str
    keywords: tuple[str, ...] = ()
    timestamp: datetime


class DietaryBreakdown(BaseModel):
    """Per food category counts of dietary entries."""

    model_config = ConfigDict(frozen=True)

    carbs: int = 0
    proteins: int = 0
    dairy: int = 0
    fibre: int = 0

    @property
    def total(self) -> int:
        return self.carbs + self.proteins + self.dairy + self.fibre

    def count(self, food_category: FoodCategory) -> int:
        return getattr(self, food_category.value)


class TrackingSummary(BaseModel):
    """Recomputed view over all tracking entries."""

    model_config = ConfigDict(frozen=True)

    symptoms: tuple[SummaryItem, ...] = ()
    triggers: tuple[SummaryItem, ...] = ()
    dietary: DietaryBreakdown = Field(default_factory=DietaryBreakdown)
    total_entries: int = 0

    @property
    def is_empty(self) -> bool:
        return self.total_entries == 0
