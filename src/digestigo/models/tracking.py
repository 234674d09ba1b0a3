"""Tracking data models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    """What kind of health information a message conveys."""
    SYMPTOM = "symptom"
    DIETARY = "dietary"
    TRIGGER = "trigger"
    GENERAL = "general"  # Non-health chat, never saved


class FoodCategory(str, Enum):
    """Nutritional bucket for dietary entries."""
    CARBS = "carbs"
    PROTEINS = "proteins"
    DAIRY = "dairy"
    FIBRE = "fibre"


class Categorization(BaseModel):
    """
    Classifier output for a single message.

    `general` never appears together with a specific category, and
    categories keep the order the classifier returned them in.
    """

    categories: list[Category] = Field(min_length=1)
    food_category: Optional[FoodCategory] = None
    keywords: list[str] = Field(default_factory=list, max_length=5)
    summaries: dict[Category, str] = Field(default_factory=dict)
    extracted_symptom: Optional[str] = None

    @field_validator("categories")
    @classmethod
    def _normalize_categories(cls, value: list[Category]) -> list[Category]:
        unique = list(dict.fromkeys(value))
        specific = [c for c in unique if c != Category.GENERAL]
        return specific or [Category.GENERAL]

    @property
    def is_general(self) -> bool:
        return self.categories == [Category.GENERAL]

    def summary_for(self, category: Category) -> Optional[str]:
        return self.summaries.get(category)


class NewEntry(BaseModel):
    """Entry fields supplied by the caller, before id and timestamp exist."""

    model_config = ConfigDict(frozen=True)

    category: Category
    message: str
    summary: str
    food_category: Optional[FoodCategory] = None
    keywords: tuple[str, ...] = ()

    @property
    def dedup_key(self) -> tuple[Category, str]:
        return (self.category, self.summary)


class TrackingEntry(NewEntry):
    """One persisted, immutable fact extracted from a user message."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=datetime.now)

    @classmethod
    def from_new(cls, new_entry: NewEntry) -> "TrackingEntry":
        return cls(**new_entry.model_dump())
