"""Turns raw classifier replies into categorizations."""

import json
import logging
import re
from typing import Any, Optional

from ..models.tracking import Categorization, Category, FoodCategory

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[ \t]*(?:json)?[ \t]*\n?", re.IGNORECASE)

FALLBACK_SUMMARY_CHARS = 80
ELLIPSIS = "..."


def truncate(message: str, limit: int = FALLBACK_SUMMARY_CHARS) -> str:
    """First ``limit`` characters of a message."""
    return message[:limit]


def ellipsize(message: str, limit: int = FALLBACK_SUMMARY_CHARS) -> str:
    """Shorten a message to at most ``limit`` characters, ellipsis included."""
    keep = limit - len(ELLIPSIS)
    if len(message) > keep:
        return message[:keep] + ELLIPSIS
    return message


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences and inline backticks."""
    text = _FENCE_RE.sub("", text)
    return text.replace("`", "").strip()


class ClassificationResponseParser:
    """
    Parses classifier output into a :class:`Categorization`.

    Models usually answer with near-JSON, sometimes wrapped in markdown, and
    sometimes with the older single ``category``/``summary`` fields. Anything
    that can't be salvaged becomes a plain ``general`` categorization;
    :meth:`parse` never raises.
    """

    MAX_KEYWORDS = 5

    def parse(self, raw_text: Optional[str], message: str) -> Categorization:
        """
        Parse a classifier reply.

        Args:
            raw_text: The model's completion
            message: The user message that was categorized, used for
                fallback summaries

        Returns:
            A validated categorization
        """
        categorization = self.try_parse(raw_text, message)
        if categorization is None:
            return self.fallback(message)
        return categorization

    def try_parse(self, raw_text: Optional[str], message: str) -> Optional[Categorization]:
        """Parse a classifier reply, or return None if nothing usable came back."""
        try:
            data = json.loads(strip_code_fences(raw_text or ""))
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            return self._build(data, message)
        except (ValueError, TypeError, RecursionError) as e:
            # json.JSONDecodeError and pydantic's ValidationError are ValueErrors
            logger.warning("Unparseable categorization (%s) for: %.100s", e, message)
            return None

    def fallback(self, message: str) -> Categorization:
        """Categorization used when the classifier gave nothing usable."""
        return Categorization(
            categories=[Category.GENERAL],
            summaries={Category.GENERAL: ellipsize(message)},
        )

    def _build(self, data: dict, message: str) -> Categorization:
        categories = self._categories(data)
        return Categorization(
            categories=categories,
            food_category=self._food_category(data.get("foodCategory")),
            keywords=self._keywords(data.get("keywords")),
            summaries=self._summaries(data, categories, message),
            extracted_symptom=self._text(data.get("extractedSymptom")),
        )

    def _categories(self, data: dict) -> list[Category]:
        raw = data.get("categories")
        if not isinstance(raw, list) or not raw:
            raw = [data.get("category") or Category.GENERAL.value]

        categories = []
        for value in raw:
            try:
                category = Category(value)
            except ValueError:
                logger.debug("Ignoring unknown category %r", value)
                continue
            if category not in categories:
                categories.append(category)

        specific = [c for c in categories if c != Category.GENERAL]
        return specific or [Category.GENERAL]

    def _summaries(
        self,
        data: dict,
        categories: list[Category],
        message: str,
    ) -> dict[Category, str]:
        raw = data.get("summaries")
        summaries = {}
        if isinstance(raw, dict):
            for category in categories:
                text = self._text(raw.get(category.value))
                if text:
                    summaries[category] = text

        if not summaries:
            default = self._text(data.get("summary")) or truncate(message)
            summaries = {category: default for category in categories}

        return summaries

    def _keywords(self, raw: Any) -> list[str]:
        if not isinstance(raw, list):
            return []
        keywords = [k.strip() for k in raw if isinstance(k, str) and k.strip()]
        return keywords[: self.MAX_KEYWORDS]

    def _food_category(self, raw: Any) -> Optional[FoodCategory]:
        if not raw:
            return None
        try:
            return FoodCategory(str(raw).lower())
        except ValueError:
            return None

    @staticmethod
    def _text(raw: Any) -> Optional[str]:
        if isinstance(raw, str) and raw.strip():
            return raw.strip()
        return None
